"""
CWE Bot - Discord moderation and community management.

Core Components:

- **Moderation**: warn, kick, ban and mute commands that persist an
  infraction (and a mute) before the action is enforced on Discord
- **Infraction history**: per-member history, paginated 20 per page
- **Mute expiry**: background task that lifts expired mutes
- **Community records**: campaigns, ranks, requests, suggestions and tags
  stored in the same SQLite database

Usage:
    from cwebot.main import main
    main()
"""
