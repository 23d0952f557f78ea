import sys

from sample_app_frontend.cli import main

sys.exit(main())
