import logging
from pathlib import Path

import pytest

from contact_search.core.contact import Contact
from contact_search.core.ranker import ContactRanker, get_record_field, rank, validate_weights
from contact_search.core.scorer import field_similarity
from contact_search.core.search import ContactSearch
from contact_search.core.store import ContactStore
from contact_search.core.types import WeightConfigurationError
from contact_search.io.csv import CSVHandler
from contact_search.io.vcard import VCardHandler
from contact_search.settings import DEFAULT_WEIGHTS, SIMILARITY_THRESHOLD
from contact_search.utils.string import (
    dice_coefficient,
    metaphone_match,
    normalized_levenshtein,
    soundex_match,
    token_match_ratio,
)
from main import load_contacts, main, parse_weights

# --- Logging Configuration ---
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class SearchCheckFailed(Exception):
    pass


# --- Fixtures ---
@pytest.fixture
def john():
    return {"name": "John Doe", "email": "john@x.com"}


@pytest.fixture
def jane():
    return {"name": "Jane Smith", "email": "jane@x.com"}


@pytest.fixture
def candidates(john, jane):
    return [john, jane]


# --- String measures ---
def test_dice_coefficient():
    assert dice_coefficient("john", "john") == 1.0
    assert dice_coefficient("john doe", "johndoe") == 1.0  # whitespace is ignored
    assert dice_coefficient("night", "nacht") == pytest.approx(0.25)
    assert dice_coefficient("a", "b") == 0.0
    assert dice_coefficient("john", "xyz") == 0.0


def test_normalized_levenshtein():
    assert normalized_levenshtein("kitten", "sitting") == pytest.approx(4 / 7)
    assert normalized_levenshtein("john", "john") == 1.0
    assert normalized_levenshtein("john", "john doe") == pytest.approx(0.5)
    assert normalized_levenshtein("", "") == 0.0


def test_phonetic_matches():
    assert soundex_match("robert", "rupert")
    assert not soundex_match("john", "mary")
    assert metaphone_match("jane smith", "jane smith")
    assert not metaphone_match("john", "mary")


def test_token_match_ratio():
    assert token_match_ratio("john smith", "smith john") == 1.0
    assert token_match_ratio("john xyz", "john doe") == 0.5
    assert token_match_ratio("", "john doe") == 0.0
    assert token_match_ratio("john", "") == 0.0


# --- Field similarity ---
def test_absent_field_scores_zero():
    for field in (None, ""):
        logger.info(f"\tInput: 'john' vs {field!r}")
        assert field_similarity("john", field) == 0.0
    assert field_similarity("", "John Doe") == 0.0
    assert field_similarity(None, "John Doe") == 0.0


def test_identical_strings_score_one():
    assert field_similarity("John Doe", "john doe") == pytest.approx(1.0)
    assert field_similarity("CEO", "ceo") == pytest.approx(1.0)


def test_field_similarity_is_bounded():
    pairs = [
        ("john", "John Doe"),
        ("smith", "Jane Smith"),
        ("xyz123", "jane@x.com"),
        ("j", "jo"),
        ("acme inc", "Acme Incorporated"),
        ("  padded  ", "padded"),
        ("robert", "Rupert"),
    ]
    for query, field in pairs:
        score = field_similarity(query, field)
        logger.info(f"\tInput: {query!r} vs {field!r} -> {score}")
        assert 0.0 <= score <= 1.0


def test_partial_match_blends_measures():
    # dice 2/3, levenshtein 1/2, no phonetic match, one of one tokens matched
    expected = 0.3 * (2 / 3) + 0.3 * 0.5 + 0.1
    assert field_similarity("john", "John Doe") == pytest.approx(expected)


def test_non_string_field_fails_fast():
    with pytest.raises(TypeError):
        field_similarity("john", 42)
    with pytest.raises(TypeError):
        field_similarity(["john"], "John Doe")


def test_observer_sees_every_score():
    seen = []
    score = field_similarity("john", "John Doe", observer=lambda field, s: seen.append((field, s)))
    assert seen == [("John Doe", score)]
    assert field_similarity("john", None, observer=lambda field, s: seen.append(field)) == 0.0
    assert len(seen) == 1


# --- Ranking ---
def test_empty_query_passes_through(candidates):
    for query in ("", "   ", "\t\n"):
        result = rank(query, candidates)
        assert result == candidates
        assert result[0] is candidates[0] and result[1] is candidates[1]


def test_full_name_queries_find_one_contact(candidates, john, jane):
    tests_run = 0
    for query, expected in [("john doe", [john]), ("Jane Smith", [jane]), ("xyz123", [])]:
        result = rank(query, candidates)
        logger.info(f"\tQuery: {query!r} -> {result}")
        tests_run += 1
        if result != expected:
            raise SearchCheckFailed(f"Unexpected results for {query!r}: {result}")
    logger.info(f"\t{tests_run} queries checked")


def test_single_token_queries_with_name_weight(candidates, john, jane):
    assert rank("john", candidates, {"name": 1.0}) == [john]
    assert rank("smith", candidates, {"name": 1.0}) == [jane]


def test_exact_name_passes_threshold(john, jane):
    ranker = ContactRanker()
    unrelated = {"name": "Zoltan Quirk", "email": "zq@w.org"}
    exact = ranker.score("JOHN DOE", john)
    assert exact >= 1.0 / sum(DEFAULT_WEIGHTS.values())
    assert exact > SIMILARITY_THRESHOLD
    assert exact >= ranker.score("JOHN DOE", unrelated)


def test_results_sorted_by_score():
    with_email = {"name": "Jane Smith", "email": "jane@x.com"}
    name_only = {"name": "Jane Smith"}
    ranker = ContactRanker()

    result = ranker.rank("jane smith", [name_only, with_email])

    assert result == [with_email, name_only]
    scores = [ranker.score("jane smith", r) for r in result]
    assert scores == sorted(scores, reverse=True)
    assert all(s > SIMILARITY_THRESHOLD for s in scores)


def test_ties_keep_input_order():
    first = {"name": "Jane Smith"}
    second = {"name": "Jane Smith"}
    result = rank("jane smith", [first, second])
    assert result[0] is first
    assert result[1] is second


def test_unrelated_contacts_are_excluded(candidates):
    assert rank("qqqq", candidates) == []


def test_rank_does_not_mutate_input(candidates):
    snapshot = [dict(c) for c in candidates]
    order = list(candidates)
    rank("jane smith", candidates)
    assert candidates == snapshot
    assert all(a is b for a, b in zip(candidates, order))


def test_rank_rejects_non_string_fields():
    with pytest.raises(TypeError):
        rank("john", [{"name": 42}])


def test_weight_validation():
    with pytest.raises(WeightConfigurationError):
        ContactRanker({"name": 0.0, "email": 0})
    with pytest.raises(WeightConfigurationError):
        ContactRanker({"name": 1.0, "email": -0.5})
    with pytest.raises(WeightConfigurationError):
        validate_weights({"name": "high"})
    with pytest.raises(WeightConfigurationError):
        ContactRanker({"name": float("nan"), "email": 1.0})
    with pytest.raises(WeightConfigurationError):
        ContactRanker({"name": float("inf")})
    with pytest.raises(WeightConfigurationError):
        ContactRanker(parse_weights("name=nan"))
    with pytest.raises(ValueError):
        ContactRanker({})
    assert validate_weights({"name": 2, "notes": 0}) == {"name": 2.0, "notes": 0.0}


def test_prefilter(john):
    ranker = ContactRanker(prefilter_ratio=60)
    assert ranker.passes_prefilter("john", john)
    assert not ranker.passes_prefilter("xyz", john)
    assert ranker.rank("john doe", [john]) == [john]


def test_prefilter_rejects_non_string_fields():
    ranker = ContactRanker(prefilter_ratio=60)
    with pytest.raises(TypeError):
        ranker.rank("john", [{"name": 42}])
    with pytest.raises(TypeError):
        ranker.passes_prefilter("john", {"name": "John Doe", "email": ["john@x.com"]})


def test_ranks_contact_objects():
    contacts = ContactStore.with_sample_data().all()
    result = rank("john doe", contacts)
    assert [c.name for c in result] == ["John Doe"]


# --- Contacts and storage ---
def test_contact_from_dict_aliases():
    contact = Contact.from_dict({
        "Full Name": "Ann Lee",
        "E-mail": "ann@lee.io",
        "Organization": "Acme",
        "Job Title": "CFO",
        "Tags": "vip; board",
    })
    assert contact.name == "Ann Lee"
    assert contact.email == "ann@lee.io"
    assert contact.company == "Acme"
    assert contact.title == "CFO"
    assert contact.notes is None
    assert contact.tags == ["vip", "board"]
    assert contact.get_field("missing") is None
    assert get_record_field(contact, "title") == "CFO"
    assert get_record_field(contact, "missing") is None


def test_store_crud():
    store = ContactStore.with_sample_data()
    assert len(store) == 2
    added = store.add(Contact(name="Ann Lee"))
    assert added.id == 3
    assert store.get(3) is added

    store.update(3, title="CFO")
    assert store.get(3).title == "CFO"
    with pytest.raises(ValueError):
        store.update(3, id=9)
    with pytest.raises(ValueError):
        store.add(Contact(name="Copy", id=1))

    assert store.delete(3)
    assert not store.delete(3)
    assert store.get(3) is None
    assert store.update(3, title="CTO") is None


def test_search_service_empty_query_skips_ranker():
    calls = []

    class CountingRanker(ContactRanker):
        def rank(self, query, candidates):
            calls.append(query)
            return super().rank(query, candidates)

    store = ContactStore.with_sample_data()
    service = ContactSearch(store, CountingRanker())

    assert service.search("") == store.all()
    assert service.search(None) == store.all()
    assert calls == []
    assert [c.name for c in service.search("jane smith")] == ["Jane Smith"]
    assert calls == ["jane smith"]


def test_search_service_candidate_cap():
    store = ContactStore.with_sample_data()
    assert ContactSearch(store, max_candidates=1).search("jane smith") == []
    assert [c.name for c in ContactSearch(store).search("jane smith")] == ["Jane Smith"]
    with pytest.raises(ValueError):
        ContactSearch(store, max_candidates=0)


# --- Import and export ---
def test_read_csv_with_aliases(tmp_path: Path):
    path = tmp_path / "export.csv"
    path.write_text(
        "ID,Full Name,E-mail,Company,Job Title,Notes\n"
        "7,John Doe,john@x.com,Acme Inc,CEO,\n"
        "8,Jane Smith,,Tech Solutions,,Technical partner\n",
        encoding="utf-8",
    )
    contacts = CSVHandler().read_csv(str(path))

    assert [c.id for c in contacts] == [7, 8]
    assert contacts[0].company == "Acme Inc"
    assert contacts[0].notes is None
    assert contacts[1].email is None
    assert contacts[1].notes == "Technical partner"


def test_write_csv_keeps_rank_order(tmp_path: Path):
    path = tmp_path / "results.csv"
    contacts = ContactStore.with_sample_data().all()[::-1]
    CSVHandler().write_csv(contacts, str(path))

    loaded = CSVHandler().read_csv(str(path))
    assert [c.name for c in loaded] == ["Jane Smith", "John Doe"]
    assert loaded[0].tags == ["technical", "development"]


def test_read_vcard(tmp_path: Path):
    path = tmp_path / "contacts.vcf"
    path.write_text(
        "BEGIN:VCARD\r\n"
        "VERSION:3.0\r\n"
        "FN:Jane Smith\r\n"
        "N:Smith;Jane;;;\r\n"
        "EMAIL:jane@example.com\r\n"
        "ORG:Tech Solutions\r\n"
        "TITLE:CTO\r\n"
        "NOTE:Technical partner\r\n"
        "END:VCARD\r\n",
        encoding="utf-8",
    )
    contacts = VCardHandler().read_vcard(str(path))

    assert len(contacts) == 1
    contact = contacts[0]
    assert contact.name == "Jane Smith"
    assert contact.email == "jane@example.com"
    assert contact.company == "Tech Solutions"
    assert contact.title == "CTO"
    assert contact.notes == "Technical partner"


def test_write_vcard(tmp_path: Path):
    path = tmp_path / "out.vcf"
    VCardHandler().write_vcard(ContactStore.with_sample_data().all(), str(path))
    loaded = VCardHandler().read_vcard(str(path))
    assert [c.name for c in loaded] == ["John Doe", "Jane Smith"]
    assert loaded[0].company == "Acme Inc"


# --- Command line ---
def test_parse_weights():
    assert parse_weights("name=1, email=0.5") == {"name": 1.0, "email": 0.5}
    with pytest.raises(ValueError):
        parse_weights("name")
    with pytest.raises(ValueError):
        parse_weights("name=high")


def test_load_contacts_rejects_unknown_format(tmp_path: Path):
    path = tmp_path / "contacts.txt"
    path.write_text("John Doe", encoding="utf-8")
    with pytest.raises(ValueError):
        load_contacts([path])


def test_main_rejects_empty_weight_map(tmp_path: Path):
    source = tmp_path / "contacts.csv"
    CSVHandler().write_csv(ContactStore.with_sample_data().all(), str(source))
    with pytest.raises(WeightConfigurationError):
        main("john doe", [source], weights=parse_weights(","))


def test_main_end_to_end(tmp_path: Path, capsys):
    source = tmp_path / "contacts.csv"
    CSVHandler().write_csv(ContactStore.with_sample_data().all(), str(source))

    results = main("jane smith", [tmp_path])
    assert [c.name for c in results] == ["Jane Smith"]
    assert "Jane Smith" in capsys.readouterr().out

    output = tmp_path / "out" / "ranked.csv"
    main("john doe", [source], output_path=output, limit=1)
    assert [c.name for c in CSVHandler().read_csv(str(output))] == ["John Doe"]


def run_tests():
    """Run the suite directly without a pytest command line"""
    return pytest.main([__file__, "-q"])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    raise SystemExit(run_tests())
