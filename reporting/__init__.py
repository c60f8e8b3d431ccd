"""Ship inspection reporting application.

Models, services, views and route registrations for organizations,
users, vessels, inspection reports and their audit trail.
"""
