"""
Discord-facing layer: cogs, the shared moderation command handler and the
text command table.
"""
