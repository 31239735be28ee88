from __future__ import annotations

from typing import Any

IRATION_PAGE_URL = "https://www.stubhub.com/iration-tickets/performer/12345"

IRATION_SNAPSHOT = """### Page state
- Page URL: https://www.stubhub.com/iration-tickets/performer/12345
- Page Title: Iration Tickets | StubHub
- Page Snapshot:
```yaml
- banner [ref=e1]:
  - link "StubHub" [ref=e2] [cursor=pointer]:
    - /url: /
- main [ref=e3]:
  - heading "Iration Tickets" [level=1] [ref=e4]
  - button "Sort by date" [ref=e5]
  - list [ref=e6]:
    - listitem [ref=e7]:
      - heading "May" [level=4] [ref=e8]
      - heading "14" [level=4] [ref=e9]
      - paragraph "2026" [ref=e10]
      - paragraph "Iration" [ref=e11]
      - paragraph "The Sylvee, Madison, WI" [ref=e12]
      - paragraph "Thu • 8:00 PM" [ref=e13]
      - link "See Tickets" [ref=e14] [cursor=pointer]:
        - /url: /iration-madison-tickets-5-14-2026/event/1001
    - listitem [ref=e15]:
      - heading "Jun" [level=4] [ref=e16]
      - heading "02" [level=4] [ref=e17]
      - paragraph "2026" [ref=e18]
      - paragraph "Iration" [ref=e19]
      - paragraph "Red Rocks Amphitheatre" [ref=e20]
      - paragraph "Tue • 7:30 PM" [ref=e21]
      - link "See Tickets" [ref=e22] [cursor=pointer]:
        - /url: /iration-morrison-tickets-6-2-2026/event/1002
    - listitem [ref=e23]:
      - heading "Jul" [level=4] [ref=e24]
      - heading "19" [level=4] [ref=e25]
      - paragraph "2026" [ref=e26]
      - paragraph "Iration" [ref=e27]
      - paragraph "Hollywood Bowl, Los Angeles, CA" [ref=e28]
      - paragraph "Sun • 8:00 PM" [ref=e29]
      - link "See Tickets" [ref=e30] [cursor=pointer]:
        - /url: /iration-los-angeles-tickets-7-19-2026/event/1003
```
"""

NO_EVENTS_SNAPSHOT = """- Page URL: https://www.stubhub.com/secure/search?q=iration
```yaml
- main [ref=e1]:
  - heading "Iration Tickets" [level=1] [ref=e2]
  - paragraph "No events found for Iration near Iowa" [ref=e3]
  - region "Recently viewed" [ref=e4]:
    - heading "Dec" [level=4] [ref=e5]
    - heading "31" [level=4] [ref=e6]
    - paragraph "2025" [ref=e7]
    - paragraph "Some Other Band" [ref=e8]
```
"""

LISTED_WITHOUT_DATES_SNAPSHOT = """```yaml
- main [ref=e1]:
  - heading "Iration" [level=1] [ref=e2]
  - paragraph "Reggae rock band from Santa Barbara" [ref=e3]
  - button "Follow" [ref=e4]
```
"""

EMPTY_RESULTS_SNAPSHOT = """```yaml
- main [ref=e1]:
  - combobox "Sort by" [ref=e2]
  - button "All locations" [ref=e3]
  - img [ref=e4]
  - graphics-symbol [ref=e5]
```
"""

LISTITEM_EVENTS_SNAPSHOT = """- list [ref=e1]:
  - listitem [ref=e2]: Iration - Fri, Aug 7 • 7:00 PM - Starlight Theatre, Kansas City
  - listitem [ref=e3]: Iration - Sat, Aug 8 • 8:00 PM - Surly Field, Minneapolis
  - heading "Search results for Iration" [level=2] [ref=e4]
"""

DISTANT_DATES_SNAPSHOT = (
    "- Page URL: https://www.example.com/performers/12345\n"
    "```yaml\n"
    "- main [ref=e1]:\n"
    "  - heading \"Iration Tickets\" [level=1] [ref=e2]\n"
    + "".join(f"  - paragraph \"Featured story {index}\" [ref=f{index}]\n" for index in range(30))
    + "  - heading \"May\" [level=4] [ref=e3]\n"
    "  - heading \"14\" [level=4] [ref=e4]\n"
    "  - paragraph \"2026\" [ref=e5]\n"
    "  - heading \"Jun\" [level=4] [ref=e6]\n"
    "  - heading \"02\" [level=4] [ref=e7]\n"
    "  - paragraph \"2026\" [ref=e8]\n"
    "  - heading \"May\" [level=4] [ref=e9]\n"
    "  - heading \"14\" [level=4] [ref=e10]\n"
    "  - paragraph \"2026\" [ref=e11]\n"
    "```\n"
)

SEARCH_TEXT_RESULT = (
    "Top results:\n"
    "[Iration announces summer tour](https://news.example.com/iration-summer-tour)\n"
    "Full listing at https://www.example.org/iration/dates\n"
)


def capability_payloads() -> list[dict[str, Any]]:
    """Catalog used across routing tests, in the wire shape the registry forwards."""
    return [
        {
            "serverId": "exa-search",
            "displayName": "Exa Search",
            "tools": [
                {"name": "web_search_exa", "description": "Search the web for news and trends"},
            ],
        },
        {
            "serverId": "playwright-mcp",
            "displayName": "Playwright Browser",
            "tools": [
                {"name": "browser_snapshot", "description": "Capture an accessibility snapshot"},
                {"name": "browser_navigate", "description": "Navigate to a website URL"},
            ],
        },
        {
            "serverId": "google-maps",
            "displayName": "Google Maps",
            "tools": [
                {"name": "maps_geocode", "description": "Geocode an address"},
                {"name": "maps_search_places", "description": "Search for places such as restaurants or car rental"},
            ],
        },
        {
            "serverId": "langchain-agent",
            "displayName": "LangChain Agent",
            "tools": [{"name": "agent_executor", "description": "Run a reasoning agent"}],
        },
    ]
