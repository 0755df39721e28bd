"""UI providers: shadcn/ui and Magic UI."""

from __future__ import annotations

from nstack.features.models import ArtifactTemplate, Category, Provider

# Shared by both providers; identical content means the second injection
# reports it as already present instead of conflicting.
CN_UTILS = ArtifactTemplate(path="{{ lib_dir }}/utils.ts", template="shadcn/utils.ts.j2")

UI_PROVIDERS: tuple[Provider, ...] = (
    Provider(
        id="shadcn",
        name="shadcn/ui",
        category=Category.UI,
        description="Add shadcn/ui components and configuration",
        dependencies=[
            "class-variance-authority@^0.7.1",
            "clsx@^2.1.1",
            "tailwind-merge@^2.5.0",
            "lucide-react@^0.460.0",
            "@radix-ui/react-slot@^1.1.0",
        ],
        artifacts=(
            ArtifactTemplate(path="components.json", template="shadcn/components.json.j2"),
            CN_UTILS,
            ArtifactTemplate(
                path="{{ components_dir }}/ui/button.tsx", template="shadcn/button.tsx.j2"
            ),
        ),
        variables={"base_color": "neutral"},
        next_steps=(
            "Add more components: {{ exec }} shadcn@latest add card dialog",
            "Make sure {{ globals_css }} defines the shadcn CSS variables",
        ),
    ),
    Provider(
        id="magicui",
        name="Magic UI",
        category=Category.UI,
        description="Add magicui components and configuration",
        dependencies=[
            "motion@^11.11.0",
            "clsx@^2.1.1",
            "tailwind-merge@^2.5.0",
        ],
        artifacts=(
            CN_UTILS,
            ArtifactTemplate(
                path="{{ components_dir }}/magicui/marquee.tsx", template="magicui/marquee.tsx.j2"
            ),
            ArtifactTemplate(
                path="{{ components_dir }}/magicui/marquee.css", template="magicui/marquee.css.j2"
            ),
        ),
        next_steps=(
            "Import {{ components_dir }}/magicui/marquee.css from {{ globals_css }}",
            "Browse more components: {{ exec }} shadcn@latest add \"https://magicui.design/r/<name>\"",
        ),
    ),
)
