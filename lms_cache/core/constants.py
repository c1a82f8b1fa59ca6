"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure. Used by the key builders in
lms_cache.infrastructure.cache.keys and by the invalidation recipes.
"""

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Entity prefixes (used as {prefix}:{id}[:{sub}])
CACHE_PREFIX_USER = "user"
CACHE_PREFIX_CLASS = "class"
CACHE_PREFIX_LESSON = "lesson"
CACHE_PREFIX_WARD = "ward"
CACHE_PREFIX_ENROLLMENT = "enrollment"

# Collection prefixes (used as {prefix}:{scope}:{id})
CACHE_PREFIX_LESSONS = "lessons"
CACHE_PREFIX_MESSAGES = "messages"
CACHE_PREFIX_GRADES = "grades"
CACHE_PREFIX_ENROLLMENTS = "enrollments"
CACHE_PREFIX_CONVERSATIONS = "conversations"
CACHE_PREFIX_UNREAD = "unread"

# Symmetric two-party relation (sorted pair)
CACHE_PREFIX_THREAD = "thread"

# Sub-resources
CACHE_SUB_PROFILE = "profile"
CACHE_SUB_LIST = "list"
CACHE_SUB_MEMBERS = "members"
CACHE_SUB_LESSONS = "lessons"
CACHE_SUB_ENROLLMENTS = "enrollments"
CACHE_SUB_COUNT = "count"

# Scope segments for collection keys
CACHE_SCOPE_CLASS = "class"
CACHE_SCOPE_STUDENT = "student"
