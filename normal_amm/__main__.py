import sys

from normal_amm.cli import main

sys.exit(main())
