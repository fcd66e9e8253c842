import sys

from video_processing_service.presentation.cli import main

sys.exit(main())
