"""Project admin configuration."""

from django.contrib import admin

from projects.models import Employee, Project, ProjectAssignment


class ProjectAssignmentInline(admin.TabularInline):
    model = ProjectAssignment
    fk_name = "project"
    extra = 0
    readonly_fields = ["assigned_at"]


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "status", "progress", "budget", "spent", "created_at"]
    list_filter = ["status"]
    search_fields = ["name", "description"]
    inlines = [ProjectAssignmentInline]


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "salary", "assigned_project", "active"]
    list_filter = ["active"]
    search_fields = ["name"]
