#!/usr/bin/env python3
"""
Summarise point debug logs written by PointDebugger.

Usage:
    python tools/analyze_point_log.py <log_file_path>
"""

import re
import sys
from collections import Counter, defaultdict
from pathlib import Path

LINE_RE = re.compile(r'^\[[\d:]+\] (\w+): (.+)$')


def parse_log_file(log_path):
    """Parse the debug log into per-category entries and per-point counters."""
    categories = Counter()
    event_types = Counter()
    possession_changes = defaultdict(int)
    last_possession = {}
    undos = []
    overrides = []
    scores = []
    errors = []

    with open(log_path, 'r', encoding='utf-8') as f:
        for line in f:
            match = LINE_RE.match(line.strip())
            if not match:
                continue
            category, details = match.groups()
            categories[category] += 1

            if category == 'EVENT':
                event_match = re.search(r'Point: (\w+) .*Event: ([\w-]+) \| Possession: (\w+)', details)
                if not event_match:
                    continue
                point_id, event_type, possession = event_match.groups()
                event_types[event_type] += 1
                if last_possession.get(point_id, possession) != possession:
                    possession_changes[point_id] += 1
                last_possession[point_id] = possession
            elif category == 'UNDO':
                undos.append(details)
            elif category == 'OVERRIDE':
                overrides.append(details)
            elif category == 'SCORE':
                scores.append(details)
            elif category == 'ERROR':
                errors.append(details)

    return {
        'categories': categories,
        'event_types': event_types,
        'possession_changes': possession_changes,
        'undos': undos,
        'overrides': overrides,
        'scores': scores,
        'errors': errors,
    }


def analyze_corrections(undos, overrides):
    """Report how often the operator had to correct the log."""
    print("\n=== CORRECTIONS ===")
    print(f"  Undos: {len(undos)}")
    print(f"  Overrides: {len(overrides)}")
    if overrides and len(overrides) > len(undos):
        print("  ⚠️  More overrides than undos - event entry may be missing turnovers")


def main():
    if len(sys.argv) < 2:
        print("Usage: python tools/analyze_point_log.py <log_file_path>")
        print("\nExample:")
        print("  python tools/analyze_point_log.py debug_logs/point_debug_20251117_222236.txt")
        sys.exit(1)

    log_path = Path(sys.argv[1])

    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        sys.exit(1)

    print(f"Analyzing: {log_path.name}")
    print("=" * 60)

    data = parse_log_file(log_path)

    print("\n=== EVENT SUMMARY ===")
    for event_type, count in data['event_types'].most_common(17):
        print(f"  {event_type}: {count}")

    print("\n=== POSSESSION CHANGES PER POINT ===")
    for point_id, changes in data['possession_changes'].items():
        print(f"  {point_id}: {changes}")

    analyze_corrections(data['undos'], data['overrides'])

    print("\n=== SCORE CHANGES ===")
    for details in data['scores']:
        print(f"  {details}")

    if data['errors']:
        print("\n=== REJECTED OPERATIONS ===")
        for details in data['errors']:
            print(f"  {details}")

    print("\n" + "=" * 60)
    print("Analysis complete!")


if __name__ == '__main__':
    main()
