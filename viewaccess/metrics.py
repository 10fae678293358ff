from prometheus_client import Counter

ACCESS_CHECK_COUNTER = Counter(
    'viewaccess_access_checks_total',
    'Total number of display access checks',
    ['plugin', 'result'],
)

VALIDATION_FAILURE_COUNTER = Counter(
    'viewaccess_validation_failures_total',
    'Total number of rejected access configurations',
    ['plugin'],
)

STALE_ROLE_COUNTER = Counter(
    'viewaccess_stale_role_references_total',
    'Role references that no longer resolve to a stored role',
)
