"""Tests for skill extraction and skill-swap matching."""

from aeonwise.core.matching import extract_skills, find_matches, match_score
from aeonwise.core.models import Profile


def profile(id: str, skills=None, goals=None) -> Profile:
    return Profile(id=id, username=id, skills=skills or [], learning_goals=goals or [])


class TestExtractSkills:
    """Tests for extract_skills."""

    def test_known_skills_found(self):
        assert extract_skills("Python and React developer") == ["Python", "React"]

    def test_vocabulary_order(self):
        """Output follows the vocabulary, not the text."""
        assert extract_skills("react, python") == ["Python", "React"]

    def test_no_skills(self):
        assert extract_skills("") == []
        assert extract_skills("hello there") == []


class TestMatchScore:
    """Tests for match_score."""

    def test_both_directions(self):
        candidate = profile("c", skills=["UI Design"], goals=["learn python"])

        assert match_score(["Python"], ["design"], candidate) == 2

    def test_case_insensitive(self):
        candidate = profile("c", goals=["PYTHON"])

        assert match_score(["python"], [], candidate) == 1

    def test_no_overlap(self):
        candidate = profile("c", skills=["Cooking"], goals=["Music"])

        assert match_score(["Python"], ["Design"], candidate) == 0


class TestFindMatches:
    """Tests for find_matches."""

    def test_excludes_seeker_and_zero_scores(self):
        seeker = profile("me", skills=["Python"], goals=["Design"])
        candidates = [
            seeker,
            profile("none", skills=["Cooking"]),
            profile("one", goals=["Python"]),
        ]

        matches = find_matches(seeker, candidates)

        assert [m.profile.id for m in matches] == ["one"]

    def test_sorted_by_score_then_input_order(self):
        seeker = profile("me", skills=["Python"], goals=["Design"])
        candidates = [
            profile("a", goals=["Python"]),
            profile("b", skills=["Design"], goals=["Python"]),
            profile("c", skills=["Design"]),
        ]

        matches = find_matches(seeker, candidates)

        assert [m.profile.id for m in matches] == ["b", "a", "c"]
        assert [m.match_score for m in matches] == [2, 1, 1]

    def test_limit(self):
        seeker = profile("me", skills=["Python"])
        candidates = [profile(f"c{i}", goals=["Python"]) for i in range(8)]

        assert len(find_matches(seeker, candidates)) == 5
        assert len(find_matches(seeker, candidates, limit=2)) == 2
        assert find_matches(seeker, candidates, limit=0) == []
        assert find_matches(seeker, candidates, limit=-1) == []

    def test_to_dict_includes_score(self):
        seeker = profile("me", skills=["Python"])
        match = find_matches(seeker, [profile("a", goals=["Python"])])[0]

        data = match.to_dict()

        assert data["id"] == "a"
        assert data["match_score"] == 1
