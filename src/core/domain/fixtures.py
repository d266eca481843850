"""Identificadores fijos del escenario de pruebas del ledger.

Son constantes de proceso: los tests paralelos las comparten y cada uno se
aísla del resto con su propio `x-twisp-account-id`.
"""

from __future__ import annotations

import uuid

JOURNAL_ID = uuid.UUID("b125f5a0-e803-11f0-a078-069b540ea27c")
TRAN_CODE_ID = uuid.UUID("4e6acb34-7ecf-48d3-9892-df400be1998e")
ERNIE_ACCOUNT_ID = uuid.UUID("1fd1dd3e-33fe-4ef5-9d58-676ef8d306b5")
BERT_ACCOUNT_ID = uuid.UUID("6c6affb0-5cf5-402b-8d84-01bfc1624a2c")

ACCOUNT_ID_HEADER = "x-twisp-account-id"
