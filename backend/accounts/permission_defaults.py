# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "SUPERADMIN": {
        "finance.view",
        "finance.write",
        "finance.manage",
        "dues.view",
        "dues.assign",
        "dues.pay",
    },
    "STAFF_LEAD": {
        "finance.view",
        "finance.write",
        "finance.manage",
        "dues.view",
        "dues.assign",
        "dues.pay",
    },
    "TREASURER": {
        "finance.view",
        "finance.write",
        "finance.manage",
        "dues.view",
        "dues.assign",
        "dues.pay",
    },
    "UNIT_LEAD": {
        "finance.view",
        "dues.view",
        "dues.assign",
    },
    "CHEF": {
        "finance.view",
        "dues.view",
    },
    "USER": {
        "finance.view",
        "dues.view",
    },
}
