"""
Selection groups: named, non-overlapping time intervals over a video timeline.
"""
