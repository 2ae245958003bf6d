"""
Dashboard settings read from the environment
"""

import os

SESSION_TIMEOUT_MINUTES = int(os.getenv('BOARD_SESSION_TIMEOUT_MINUTES', 30))

# Search inputs wait this long after the last keystroke before querying
SEARCH_DEBOUNCE_SECONDS = int(os.getenv('BOARD_SEARCH_DEBOUNCE_MS', 400)) / 1000.0
HOST_SEARCH_MIN_CHARS = 2

EXAM_PAGE_SIZE = 7
KITAB_PAGE_SIZE = 10
MARKAZ_PAGE_SIZE = 10
TEACHER_PAGE_SIZES = (10, 20, 50)
MADRASA_LOOKUP_LIMIT = 10
ELIGIBILITY_TEACHER_LIMIT = 3000

MUMTAHIN_ELIGIBLE = 'MUMTAHIN_ELIGIBLE'
MARKAZ_NAME_SUFFIX = ' কেন্দ্র'

MOBILE_PAYMENT_PROVIDERS = ('bKash', 'Nagad', 'Rocket', 'Upay')

# Query cache keys, one per list that a mutation can invalidate
BANK_DASHBOARD = 'bank_dashboard'
EXAMS = 'exams'
KITABS = 'kitabs'
MARKAZES = 'markazes'
TEACHERS = 'teachers'
MUMTAHIN_DESIGNATIONS = 'mumtahin_designations'
NOTICES = 'notices'
FAQS = 'faqs'

# Profile roles allowed into the dashboard
ADMIN_ROLES = ('admin', 'super_admin')
