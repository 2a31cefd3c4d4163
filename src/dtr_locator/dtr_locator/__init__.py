"""DTR locator package.

Out-of-office authorizations ("locators") and their reconciliation into the
raw attendance log. Organized by feature modules (locators, reconciliation,
punches, shifts, ...) with a thin Flask controller layer over
service/repository layers.
"""
