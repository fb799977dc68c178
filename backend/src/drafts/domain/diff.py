from drafts.domain.entities import DiffSegment, DiffSegmentType
from drafts.domain.text import extract_text_blocks


def compare(base_text: str, target_text: str) -> list[DiffSegment]:
    """Line-level comparison of two rich-text snapshots.

    Lines are aligned by position, not by longest common subsequence: an
    inserted line shifts every later line and shows up as removed/added pairs.
    """
    base_lines = extract_text_blocks(base_text)
    target_lines = extract_text_blocks(target_text)
    segments: list[DiffSegment] = []

    for index in range(max(len(base_lines), len(target_lines))):
        base_line = base_lines[index] if index < len(base_lines) else None
        target_line = target_lines[index] if index < len(target_lines) else None

        if base_line is not None and base_line == target_line:
            segments.append(DiffSegment(type=DiffSegmentType.UNCHANGED, text=target_line))
            continue
        if base_line is not None:
            segments.append(DiffSegment(type=DiffSegmentType.REMOVED, text=base_line))
        if target_line is not None:
            segments.append(DiffSegment(type=DiffSegmentType.ADDED, text=target_line))

    return segments
