"""tikwm.com upstream package.

Proxies TikTok user profiles, user video feeds and keyword search through
the tikwm.com API and normalizes the answers.

Platform: TikTok
Provider: tikwm.com
Auth: none
"""
