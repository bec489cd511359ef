import sys

from like_labeler.app import run

sys.exit(run())
