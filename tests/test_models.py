import importlib.util
import warnings

import pytest
from pydantic import PydanticDeprecatedSince20

from voteledger.models import election_model, fee_model
from voteledger.models.election_model import VotingPeriod
from voteledger.models.fee_model import FeeConfig


@pytest.mark.parametrize("module", [election_model, fee_model])
def test_model_definitions_raise_no_deprecation_warnings(module):
    spec = importlib.util.spec_from_file_location(f"{module.__name__}_fresh", module.__file__)
    fresh = importlib.util.module_from_spec(spec)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        spec.loader.exec_module(fresh)
    assert [w for w in caught if issubclass(w.category, PydanticDeprecatedSince20)] == []


def test_schema_examples():
    fees = FeeConfig.model_json_schema()["properties"]
    assert (fees["fee_amount"]["example"], fees["free_vote_limit"]["example"], fees["max_paid_votes"]["example"]) == (1, 5, 10)
    assert VotingPeriod.model_json_schema()["properties"]["start"]["example"] == 1735689600
