import logging
import sys
import time
from datetime import timedelta
from functools import wraps

# IUPAC complement, upper and lower case; other symbols map to themselves
_BASES = "AGCTYRWSKMDVHBN"
_COMPLEMENTS = "TCGARYWSMKHBDVN"
COMPLEMENT_TABLE = str.maketrans(_BASES + _BASES.lower(), _COMPLEMENTS + _COMPLEMENTS.lower())
COMPLEMENT_BYTES = bytes.maketrans(
    (_BASES + _BASES.lower()).encode(), (_COMPLEMENTS + _COMPLEMENTS.lower()).encode()
)


def get_logger(name, level=logging.INFO):
    """out to stderr"""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        log_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(log_formatter)
        logger.addHandler(console_handler)
    return logger


def reverse_complement(dna: str) -> str:
    """Returns the reverse complement of a DNA sequence. Case is kept per base.
    >>> reverse_complement("ATCGNTA")
    'TANCGAT'
    >>> reverse_complement("AtCg")
    'cGaT'
    """
    return dna.translate(COMPLEMENT_TABLE)[::-1]


def reverse_complement_bytes(dna: bytes) -> bytes:
    """Same as reverse_complement, on raw nucleotide codes.
    >>> reverse_complement_bytes(b"GATT")
    b'AATC'
    """
    return dna.translate(COMPLEMENT_BYTES)[::-1]


def add_log(func):
    """
    logging start and done.
    """
    logger_name = f"{func.__module__}.{func.__qualname__}"
    logger = get_logger(logger_name)

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger.info("start...")
        start = time.time()
        result = func(*args, **kwargs)
        end = time.time()
        used = timedelta(seconds=end - start)
        logger.info("done. time used: %s", used)
        return result

    wrapper.logger = logger
    return wrapper
