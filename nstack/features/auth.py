"""Auth providers: Auth.js (next-auth) and Clerk."""

from __future__ import annotations

from nstack.features.models import ArtifactTemplate, Category, EnvEntry, Provider
from nstack.project.models import RouterStyle

AUTH_PROVIDERS: tuple[Provider, ...] = (
    Provider(
        id="authjs",
        name="Auth.js",
        category=Category.AUTH,
        description="Add Auth.js (next-auth) with a GitHub OAuth provider",
        dependencies=["next-auth@^5.0.0-beta.25"],
        artifacts=(
            ArtifactTemplate(path="{{ src_prefix }}auth.ts", template="authjs/auth.ts.j2"),
            ArtifactTemplate(
                path="{{ app_dir }}/api/auth/[...nextauth]/route.ts",
                template="authjs/route.app.ts.j2",
                when=RouterStyle.APP,
            ),
            ArtifactTemplate(
                path="{{ pages_dir }}/api/auth/[...nextauth].ts",
                template="authjs/route.pages.ts.j2",
                when=RouterStyle.PAGES,
            ),
            ArtifactTemplate(path="{{ src_prefix }}middleware.ts", template="authjs/middleware.ts.j2"),
        ),
        env=(
            EnvEntry(
                key="AUTH_SECRET",
                value="generate-with-npx-auth-secret",
                comment="# Auth.js",
            ),
            EnvEntry(key="AUTH_GITHUB_ID", value="your-github-client-id"),
            EnvEntry(key="AUTH_GITHUB_SECRET", value="your-github-client-secret"),
        ),
        next_steps=(
            "Generate a secret: {{ exec }} auth secret",
            "Create a GitHub OAuth app and fill AUTH_GITHUB_ID / AUTH_GITHUB_SECRET in .env",
        ),
    ),
    Provider(
        id="clerk",
        name="Clerk",
        category=Category.AUTH,
        description="Add Clerk authentication middleware and components",
        dependencies=["@clerk/nextjs@^6.5.0"],
        artifacts=(
            ArtifactTemplate(path="{{ src_prefix }}middleware.ts", template="clerk/middleware.ts.j2"),
            ArtifactTemplate(
                path="{{ components_dir }}/auth-header.tsx", template="clerk/auth-header.tsx.j2"
            ),
        ),
        env=(
            EnvEntry(
                key="NEXT_PUBLIC_CLERK_PUBLISHABLE_KEY",
                value="pk_test_your-publishable-key",
                comment="# Clerk",
            ),
            EnvEntry(key="CLERK_SECRET_KEY", value="sk_test_your-secret-key"),
        ),
        next_steps=(
            "Copy your API keys from the Clerk dashboard into .env",
            "Wrap your root layout in <ClerkProvider> and render <AuthHeader />",
        ),
    ),
)
