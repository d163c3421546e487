# settings.py
# ---------------------------------------------------------
# Handles:
#   - Logging setup for the whole package
#   - Default values shared by the pipeline functions and the CLI
# ---------------------------------------------------------

import logging

# Package logger; modules log through logging.getLogger(__name__) children
logger = logging.getLogger("kinswing")

AMINO_ACIDS = ('A', 'C', 'D', 'E', 'F', 'G', 'H', 'I', 'K', 'L',
               'M', 'N', 'P', 'Q', 'R', 'S', 'T', 'V', 'W', 'Y')

WILD_CARD = "_"
SUBSTRATE_LENGTH = 15
PWM_PSEUDO_COUNT = 0.01
BACKGROUND = "random"
N_BACKGROUND = 1000
SEED = 1234
PSEUDO_COUNT = 1
P_CUT_PWM = 0.05
P_CUT_FC = 0.05
PERMUTATIONS = 100
THREADS = 1

# Kinases built from fewer substrates than this are flagged as low confidence
MIN_CONFIDENT_SUBSTRATES = 2


def setup_logging(verbose: bool):
    """
    Configure the package logger without side effects on import.
    Attaches a console handler only if none exists.
    """
    level = logging.INFO if verbose else logging.WARNING
    logger.setLevel(level)

    # Avoid duplicate logs if setup_logging() is called more than once
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
