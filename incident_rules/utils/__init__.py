import logging
import sys

from .excel_io import (
    save_rule_mining_results,
    save_experiment_results,
    save_rules_text,
    format_rule_for_excel
)

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def setup_logging(level=logging.INFO):
    """Send incident_rules log records to stderr. Safe to call more than once."""
    logger = logging.getLogger('incident_rules')
    logger.setLevel(level)
    if not any(getattr(h, '_incident_rules', False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._incident_rules = True
        logger.addHandler(handler)
    return logger


__all__ = [
    'save_rule_mining_results',
    'save_experiment_results',
    'save_rules_text',
    'format_rule_for_excel',
    'setup_logging'
]
