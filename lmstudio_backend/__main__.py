import sys

from lmstudio_backend.cli import main

sys.exit(main())
