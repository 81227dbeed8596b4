import sys

from untar.cli import main

sys.exit(main())
