from route_alternatives.domain.routing.signature import SignatureSet, route_signature

from conftest import make_candidate


def test_signature_is_pure():
    candidate = make_candidate(1234.4, 601.6, points=[(56.3268, 44.0059), (56.33, 44.01), (56.3310, 44.0128)])

    assert route_signature(candidate) == route_signature(candidate)
    assert route_signature(candidate) == "1234|602|56.32680,44.00590|56.33100,44.01280|3"


def test_signature_ignores_interior_vertices_with_same_count():
    first = make_candidate(1000, 600, points=[(0.0, 0.0), (0.1, 0.5), (0.0, 1.0)])
    second = make_candidate(1000, 600, points=[(0.0, 0.0), (-0.1, 0.5), (0.0, 1.0)])

    assert route_signature(first) == route_signature(second)


def test_signature_changes_with_vertex_count():
    short = make_candidate(1000, 600, points=[(0.0, 0.0), (0.0, 1.0)])
    long = make_candidate(1000, 600, points=[(0.0, 0.0), (0.0, 0.5), (0.0, 1.0)])

    assert route_signature(short) != route_signature(long)


def test_signature_set_reports_new_members_only():
    signatures = SignatureSet()
    candidate = make_candidate(1000, 600)

    assert signatures.add(candidate) is True
    assert signatures.add(make_candidate(1000.2, 599.8)) is False
    assert candidate in signatures
    assert len(signatures) == 1
