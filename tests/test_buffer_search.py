"""Tests for in-buffer search and match-cursor navigation.

Protects the non-overlapping scan semantics, case handling, and wrap-around
cursor movement used by the search panel.
"""

from __future__ import annotations

import unittest

from kokona.search import SearchState, find_all


class FindAllTests(unittest.TestCase):
    def test_self_overlapping_query_is_not_double_counted(self) -> None:
        self.assertEqual(find_all("abcabcabc", "abc", True), [(0, 3), (3, 6), (6, 9)])
        self.assertEqual(find_all("aaaa", "aa", True), [(0, 2), (2, 4)])

    def test_empty_query_yields_no_matches(self) -> None:
        self.assertEqual(find_all("anything", "", False), [])

    def test_case_insensitive_and_sensitive_modes(self) -> None:
        text = "Hello hello HELLO"
        self.assertEqual(find_all(text, "hello", False), [(0, 5), (6, 11), (12, 17)])
        self.assertEqual(find_all(text, "hello", True), [(6, 11)])

    def test_case_insensitive_offsets_stay_valid_when_lowercase_changes_length(self) -> None:
        text = "İa xA"
        matches = find_all(text, "a", False)
        self.assertEqual(matches, [(1, 2), (4, 5)])
        self.assertEqual([text[start:end] for start, end in matches], ["a", "A"])

    def test_matches_are_ordered_and_disjoint(self) -> None:
        text = "ab" * 50 + "aba" * 20
        for query in ("a", "ab", "aba", "bab", "b"):
            with self.subTest(query=query):
                matches = find_all(text, query, True)
                for (_s1, end1), (start2, _e2) in zip(matches, matches[1:]):
                    self.assertLessEqual(end1, start2)
                for start, end in matches:
                    self.assertEqual(text[start:end], query)


class SearchStateTests(unittest.TestCase):
    def test_prev_from_first_match_wraps_to_last(self) -> None:
        state = SearchState()
        state.set_query("abc", True, "abcabcabc")

        self.assertEqual(state.current_match, 0)
        self.assertEqual(state.prev_match(), 2)
        self.assertEqual(state.next_match(), 0)
        self.assertEqual(state.next_match(), 1)

    def test_navigation_stays_in_range(self) -> None:
        state = SearchState()
        state.set_query("x", True, "x.x.x.x")
        for _ in range(11):
            self.assertIn(state.next_match(), range(4))
        for _ in range(13):
            self.assertIn(state.prev_match(), range(4))

    def test_navigation_is_noop_without_matches(self) -> None:
        state = SearchState()
        state.set_query("zzz", False, "abc")

        self.assertEqual(state.next_match(), 0)
        self.assertEqual(state.prev_match(), 0)
        self.assertIsNone(state.current())
        self.assertEqual(state.summary(), "0 matches found")

    def test_recompute_after_edit_clamps_cursor(self) -> None:
        state = SearchState()
        state.set_query("ab", True, "ab ab ab")
        state.prev_match()
        self.assertEqual(state.current_match, 2)

        state.find_matches("ab")

        self.assertEqual(state.matches, [(0, 2)])
        self.assertEqual(state.current_match, 0)

    def test_toggling_case_sensitivity_recomputes(self) -> None:
        state = SearchState()
        state.set_query("Ab", False, "ab AB Ab")
        self.assertEqual(len(state.matches), 3)

        state.set_case_sensitive(True, "ab AB Ab")

        self.assertEqual(state.matches, [(6, 8)])

    def test_summary_reports_position(self) -> None:
        state = SearchState()
        state.open("one two one")
        state.set_query("one", True, "one two one")
        state.next_match()

        self.assertTrue(state.is_open)
        self.assertEqual(state.current(), (8, 11))
        self.assertEqual(state.summary(), "2 matches found (showing 2/2)")


if __name__ == "__main__":
    unittest.main()
