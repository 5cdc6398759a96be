import pytest

from bundle_redact.ledger import RedactionLedger, reset_redaction_list


@pytest.fixture(autouse=True)
def _clean_default_ledger():
    reset_redaction_list()
    yield
    reset_redaction_list()


@pytest.fixture
def ledger():
    instance = RedactionLedger()
    yield instance
    instance.close()
