import sys

from wgsentinel.cli import main

sys.exit(main())
