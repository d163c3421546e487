import logging

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from kinswing import build_pwm


@pytest.fixture
def k1_table():
    return pd.DataFrame({
        'kinase': ['K1'] * 5,
        'sequence': ['AAAMAAAAAAAAAAA'] * 5,
    })


@pytest.fixture
def kinase_table():
    return pd.DataFrame({
        'kinase': ['AKT1', 'AKT1', 'AKT1', 'CDK1', 'CDK1', 'CDK1', 'CK2', 'CK2'],
        'sequence': [
            'GRPRTTSFAESCKPV',
            'ARKRERTYSFGHHAK',
            'RPRAATFAEAAAAAA',
            'AAAGSPRKSPRKAAA',
            'PAAAASPRKPASPLK',
            'VKLTSPKKSPGEEEA',
            'EEGSDSEEEEDDDDE',
            'ASDSESDEEEESEEE',
        ],
    })


@pytest.fixture
def input_data():
    return pd.DataFrame({
        'annotation': ['P1|AKT1S1|T246', 'P2|GSK3B|S9', 'P3|RB1|S807', 'P4|NPM1|S125',
                       'P5|FOXO3|S253', 'P6|LMNA|S22', 'P7|CDC25C|S216', 'P8|HSP90|S226'],
        'peptide': ['LPRPRLNTSDFQKLK', 'GRPRTTSFAESCKPV', 'PAPAASPRKPAPSLP', 'ADEDDDDDEEDDSEE',
                    'SRRRAASMDNNSKFA', 'TRSGAQASSTPLSPT', 'SGLYRSPSMPENLNR', 'EEKEDKEEEKEKEEK'],
        'fc': [2.1, 1.4, -1.8, -0.9, 0.4, -2.5, 1.1, 0.2],
        'pval': [0.001, 0.01, 0.002, 0.04, 0.3, 0.0005, 0.02, 0.8],
    })


@pytest.fixture
def pwms(kinase_table):
    return build_pwm(kinase_table)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def log_messages():
    """Messages sent to the kinswing logger during the test."""
    handler = _ListHandler()
    logger = logging.getLogger("kinswing")
    logger.addHandler(handler)
    yield handler.messages
    logger.removeHandler(handler)
