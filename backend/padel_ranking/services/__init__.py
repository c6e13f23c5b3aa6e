"""
Services Layer

Ranking engines and the thin store around them:
- Accept domain inputs (Ranking, divisions, matches, format variants)
- Return new values instead of mutating what they were given
- Do NOT depend on HTTP request/response objects
- Persistence lives in ranking_store only
"""
