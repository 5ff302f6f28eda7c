"""
Main entry point for the GlowMatch skin quiz.
Configure with GLOWMATCH_* env variables (or RUN_CONFIG) and sign in with
GLOWMATCH_USER_ID / GLOWMATCH_TOKEN.
"""

import sys

from glowmatch_quiz.main import main

if __name__ == "__main__":
    sys.exit(main())
