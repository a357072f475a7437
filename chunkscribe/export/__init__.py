"""
chunkscribe.export - Transcript output.

Renders the merged transcript into three files:
- combined.json - full segment list, pretty-printed
- transcription.txt - segment text, one line per segment
- transcription_timestamps.txt - ``[HH:MM:SS - HH:MM:SS] text`` lines
"""

from __future__ import annotations
