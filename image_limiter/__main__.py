import sys

from image_limiter.main import run

sys.exit(run())
