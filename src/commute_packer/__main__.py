import sys

from commute_packer.cli import main

sys.exit(main())
