"""Admin console controller for vector store files.

The console keeps one session: the selected vector store, a mirror of its
files, the table's column layout and the last CSV import summary.

CSV import runs in two stages with different failure granularity:
parsing is all-or-nothing (any bad row aborts before a single remote call),
while reconciliation is per-row (unmatched or rejected rows are tallied in
the summary and the rest carry on).
"""
