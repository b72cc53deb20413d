"""
Projects application.

Projects are the scoping unit of the accounting service: each owns one fund,
and non-admin users only see the projects they are assigned to.

Usage:
    from projects.models import Project, ProjectAssignment
    from projects.services import ProjectService
"""
