import sys

from nstack.cli import main

sys.exit(main())
