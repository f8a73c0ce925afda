"""
Presentation helpers that build Discord embeds from plain data.

- **moderation_embed.py**: action success/failure embeds and infraction
  history pages
"""
