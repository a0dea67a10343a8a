from .quality_detection import detect_quality, detect_source
from .title_normalizer import normalize_title, normalize_for_comparison, strip_entity_name
from .name_filter import apply_name_filter
from .deduplicate_results import deduplicate_releases
from .grouping import GroupArena, group_releases, merge_similar_groups, extract_name_tokens
from .similarity_checks import levenshtein_similarity, is_truncated_match
from .scene_matching import match_groups
from .quality_selection import select_best_release, select_for_matched, select_for_unmatched
