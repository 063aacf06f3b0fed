import pytest

from src.portal.domain.models.directory import Candidate, DirectoryKind
from src.portal.services.search.directory import staff_lookup, user_lookup
from src.portal.services.search.engine import SelectionMode


async def test_user_lookup_is_single_select_over_user_directory(api_client, credential_store):
    credential_store.set("lh_token", "token-doc1")
    picked = []
    lookup = user_lookup(api_client, picked.append)

    lookup.set_query("zoe")
    await lookup.wait_idle()
    lookup.select(lookup.results[0])

    assert lookup.mode is SelectionMode.SINGLE
    assert picked == [Candidate(id="u3", display_name="Zoe Park", subtitle="zoe@lifehealth.org")]


async def test_user_lookup_accepts_custom_search_action(api_client):
    queries = []

    async def patients_only(query):
        queries.append(query)
        return [Candidate(id="p-9", display_name="Patient Nine")]

    lookup = user_lookup(api_client, search_action=patients_only)
    lookup.set_query("ni")
    await lookup.wait_idle()

    assert queries == ["ni"]
    assert [c.id for c in lookup.results] == ["p-9"]


def test_staff_lookup_rejects_user_directory():
    with pytest.raises(ValueError):
        staff_lookup(object(), DirectoryKind.USER)
