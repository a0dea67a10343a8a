import unittest
from unittest.mock import MagicMock
import sys
import os

# Add the project root to the path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from release_scraper.models import CandidateGroup, RawRelease
from release_scraper.functions.grouping import (
    GroupArena, group_releases, merge_similar_groups, extract_name_tokens,
)

LONG_TITLE = "Jane Doe And The Very Long Beach Holiday"          # 40 characters
TRUNCATED_TITLE = LONG_TITLE[:30]                                  # 30 characters
VERY_LONG_TITLE = LONG_TITLE + " And Friends Outside"              # 60 characters


def release(title, seeders=10, indexer="prowlarr-1"):
    return RawRelease(title=title, seeders=seeders, indexer_id=indexer)


def mock_oracle(score=0.95, available=True):
    oracle = MagicMock()
    oracle.is_available.return_value = available
    oracle.similarity.return_value = score
    return oracle


class TestGroupReleases(unittest.TestCase):

    def test_titles_fixture_lengths(self):
        self.assertEqual(len(LONG_TITLE), 40)
        self.assertEqual(len(TRUNCATED_TITLE), 30)
        self.assertEqual(len(VERY_LONG_TITLE), 60)

    def test_same_content_title_groups_together(self):
        groups = group_releases([
            release("Jane Doe Beach Day Fun 1080p"),
            release("Jane.Doe.Beach.Day.Fun.720p"),
        ])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].title, "Jane Doe Beach Day Fun")
        self.assertEqual(len(groups[0].releases), 2)

    def test_keys_compare_without_case(self):
        groups = group_releases([release("Jane Doe Beach Day Fun"), release("JANE DOE BEACH DAY FUN")])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].title, "Jane Doe Beach Day Fun")

    def test_truncated_title_merges_under_longer_title(self):
        groups = group_releases([release(TRUNCATED_TITLE), release(LONG_TITLE)])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].title, LONG_TITLE)

        groups = group_releases([release(LONG_TITLE), release(TRUNCATED_TITLE)])
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].title, LONG_TITLE)

    def test_low_length_ratio_stays_separate(self):
        groups = group_releases([release(TRUNCATED_TITLE), release(VERY_LONG_TITLE)])
        self.assertEqual(len(groups), 2)

    def test_threshold_is_configurable(self):
        groups = group_releases([release(TRUNCATED_TITLE), release(VERY_LONG_TITLE)], grouping_threshold=0.5)
        self.assertEqual(len(groups), 1)

    def test_short_prefix_is_not_a_truncation(self):
        groups = group_releases([release("Jane Doe Beach Day"), release("Jane Doe Beach Day Afternoon")])
        self.assertEqual(len(groups), 2)

    def test_short_titles_are_always_singletons(self):
        groups = group_releases([release("Jane Doe 1080p"), release("Jane Doe 720p")])
        self.assertEqual(len(groups), 2)
        self.assertTrue(all(g.title == "Jane Doe" for g in groups))

    def test_group_order_follows_first_release(self):
        groups = group_releases([
            release("Jane Doe Second Scene Title"),
            release("Jane Doe First Scene Title"),
            release("Jane Doe Second Scene Title 720p"),
        ])
        self.assertEqual([g.title for g in groups], ["Jane Doe Second Scene Title", "Jane Doe First Scene Title"])


class TestGroupArena(unittest.TestCase):

    def test_replace_keeps_earlier_position(self):
        arena = GroupArena([
            CandidateGroup("first", [release("a")]),
            CandidateGroup("second", [release("b")]),
            CandidateGroup("third", [release("c")]),
        ])
        first, second, third = arena.handles()
        merged = arena.replace(third, first, "merged")
        self.assertEqual([g.title for g in arena.groups()], ["merged", "second"])
        self.assertEqual([r.title for r in arena.get(merged).releases], ["a", "c"])
        self.assertEqual(len(arena), 2)

    def test_rekey_keeps_handle_position_and_releases(self):
        original = CandidateGroup("first", [release("a")])
        arena = GroupArena([original, CandidateGroup("second", [release("b")])])
        first, second = arena.handles()
        arena.rekey(first, "first but longer")
        self.assertEqual(arena.handles(), [first, second])
        self.assertEqual([g.title for g in arena.groups()], ["first but longer", "second"])
        self.assertEqual([r.title for r in arena.get(first).releases], ["a"])
        self.assertEqual(original.title, "first")


class TestMergeSimilarGroups(unittest.TestCase):

    def setUp(self):
        self.groups = [
            CandidateGroup("Jane Doe Beach Day Fun", [release("r1")]),
            CandidateGroup("Jane Doe Fun Day At The Beach", [release("r2")]),
        ]

    def test_merges_above_threshold_under_longer_title(self):
        oracle = mock_oracle(0.95)
        with self.assertLogs('release_tracker', level='INFO') as cm:
            merged = merge_similar_groups(self.groups, oracle, threshold=0.92)
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].title, "Jane Doe Fun Day At The Beach")
        self.assertEqual([r.title for r in merged[0].releases], ["r1", "r2"])
        self.assertEqual(cm.records[0].msg['event'], 'group_merged')

    def test_below_threshold_keeps_groups(self):
        merged = merge_similar_groups(self.groups, mock_oracle(0.91), threshold=0.92)
        self.assertEqual(len(merged), 2)

    def test_oracle_failure_means_no_merge(self):
        merged = merge_similar_groups(self.groups, mock_oracle(None))
        self.assertEqual(len(merged), 2)

    def test_unavailable_oracle_is_not_called(self):
        oracle = mock_oracle(available=False)
        merged = merge_similar_groups(self.groups, oracle)
        self.assertEqual(len(merged), 2)
        oracle.similarity.assert_not_called()

    def test_different_names_skip_oracle(self):
        groups = [
            CandidateGroup("Jane Doe pool party", [release("r1")]),
            CandidateGroup("Amy Smith pool party", [release("r2")]),
        ]
        oracle = mock_oracle(0.99)
        merged = merge_similar_groups(groups, oracle)
        self.assertEqual(len(merged), 2)
        oracle.similarity.assert_not_called()

    def test_short_groups_never_merge(self):
        groups = [CandidateGroup("Jane Doe", [release("r1")]), CandidateGroup("Jane Doe", [release("r2")])]
        oracle = mock_oracle(0.99)
        self.assertEqual(len(merge_similar_groups(groups, oracle)), 2)
        oracle.similarity.assert_not_called()

    def test_merged_group_keeps_absorbing(self):
        groups = self.groups + [CandidateGroup("Jane Doe Beach Fun Day Again", [release("r3")])]
        merged = merge_similar_groups(groups, mock_oracle(0.95))
        self.assertEqual(len(merged), 1)
        self.assertEqual(len(merged[0].releases), 3)


class TestExtractNameTokens(unittest.TestCase):

    def test_capitalized_tokens_only(self):
        self.assertEqual(extract_name_tokens("Jane Doe & Amy-Smith, at the Beach"), {"jane", "doe", "amy", "smith", "beach"})

    def test_short_words_ignored(self):
        self.assertEqual(extract_name_tokens("Al Bo in a car"), set())


if __name__ == '__main__':
    unittest.main()
