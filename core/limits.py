"""Size limits and caps used across the pipeline."""

#: Characters of page text kept when a record is stored.
MAX_BODY_CHARS = 50_000
#: Links kept per record.
MAX_LINKS = 20
#: Records kept in the content store.
MAX_SITES = 10
#: Messages kept in the chat history.
MAX_HISTORY = 100
#: Characters of page text sent in a prompt, per record.
MAX_CONTEXT_CHARS = 2_000

# ── Completion request ────────────────────────────────────────────────────────
MAX_OUTPUT_TOKENS = 500
TEMPERATURE = 0.7

# ── Local heuristics ──────────────────────────────────────────────────────────
SUMMARY_SENTENCES = 5
#: Sentences must be strictly longer than this to count.
MIN_SENTENCE_CHARS = 20
LINKS_SHOWN = 10
MATCHES_PER_ENTRY = 3
MAX_SEARCH_TERMS = 5
#: Search terms must be at least this long.
MIN_TERM_CHARS = 3
