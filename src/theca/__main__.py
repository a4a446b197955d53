import sys
from theca.cli import main

sys.exit(main())
