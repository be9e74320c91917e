"""Demo records used to seed empty entity-store collections."""

from __future__ import annotations

from copy import deepcopy
from typing import Any


def _member(id_, name, email, role, team, join_date, skills, completed, efficiency):
    return {
        "id": id_,
        "name": name,
        "email": email,
        "role": role,
        "team": team,
        "status": "active",
        "skills": skills,
        "efficiency": efficiency,
        "tasks_completed": completed,
        "join_date": join_date,
        "created_at": f"{join_date}T00:00:00",
        "updated_at": f"{join_date}T00:00:00",
    }


TEAM_MEMBERS: list[dict[str, Any]] = [
    _member(1, "Tewodros Mekonnen", "tewodros@company.com", "Frontend Developer", "Engineering Team",
            "2023-01-15", ["React", "JavaScript", "CSS", "TypeScript"], 42, 95),
    _member(2, "Selamawit Assefa", "selamawit@company.com", "UI Designer", "Design Team",
            "2023-02-20", ["Figma", "Photoshop", "UI/UX Design", "Prototyping"], 38, 92),
    _member(3, "Mikias Getachew", "mikias@company.com", "Backend Developer", "Engineering Team",
            "2023-03-10", ["Node.js", "Python", "MongoDB", "API Development"], 56, 98),
    _member(4, "Betelhem Alemu", "betelhem@company.com", "QA Engineer", "QA Team",
            "2023-01-30", ["Testing", "Automation", "Selenium", "Jest"], 31, 88),
    _member(5, "Girma Jembere", "girma@company.com", "DevOps Engineer", "DevOps Team",
            "2023-02-25", ["Docker", "AWS", "CI/CD", "Kubernetes"], 29, 94),
    _member(6, "Tolossa Negash", "tolossa@company.com", "Frontend Developer", "Engineering Team",
            "2023-04-05", ["React", "Vue.js", "Sass", "Webpack"], 24, 90),
    _member(7, "Tigist Chernet", "tigist@company.com", "UI Designer", "Design Team",
            "2023-03-18", ["Sketch", "Adobe XD", "Illustrator", "Prototyping"], 19, 86),
    _member(8, "Eyerusalem Wondimu", "eyerusalem@company.com", "QA Engineer", "QA Team",
            "2023-02-14", ["Manual Testing", "Postman", "JIRA", "Test Planning"], 27, 91),
    _member(9, "Fikadu Eshetu", "fikadu@company.com", "DevOps Engineer", "DevOps Team",
            "2023-05-10", ["Linux", "Jenkins", "Terraform", "Ansible"], 15, 89),
]

TEAMS: list[dict[str, Any]] = [
    {"id": 1, "name": "Engineering Team", "lead_id": 1, "member_ids": [1, 3, 6], "performance": 94,
     "description": "Responsible for developing and maintaining software applications",
     "color": "#4DA5AD", "created_at": "2023-01-10T00:00:00", "updated_at": "2023-01-10T00:00:00"},
    {"id": 2, "name": "Design Team", "lead_id": 2, "member_ids": [2, 7], "performance": 89,
     "description": "Responsible for UI/UX design and user experience",
     "color": "#FF6B6B", "created_at": "2023-01-12T00:00:00", "updated_at": "2023-01-12T00:00:00"},
    {"id": 3, "name": "QA Team", "lead_id": 4, "member_ids": [4, 8], "performance": 90,
     "description": "Quality assurance and testing team",
     "color": "#51CF66", "created_at": "2023-01-15T00:00:00", "updated_at": "2023-01-15T00:00:00"},
    {"id": 4, "name": "DevOps Team", "lead_id": 5, "member_ids": [5, 9], "performance": 92,
     "description": "Infrastructure and deployment management",
     "color": "#FF922B", "created_at": "2023-01-18T00:00:00", "updated_at": "2023-01-18T00:00:00"},
]

PROJECTS: list[dict[str, Any]] = [
    {"id": 1, "name": "Mobile App v2", "status": "active", "progress": 75, "priority": "high",
     "description": "Next generation mobile application with enhanced features",
     "start_date": "2024-01-15", "deadline": "2024-06-15", "team_id": 1, "team_member_ids": [1, 3, 6],
     "budget": 50000, "spent": 37500, "manager": "Tewodros Mekonnen",
     "created_at": "2024-01-01T00:00:00", "updated_at": "2024-03-15T00:00:00"},
    {"id": 2, "name": "Website Redesign", "status": "active", "progress": 45, "priority": "medium",
     "description": "Modern responsive website redesign",
     "start_date": "2024-02-01", "deadline": "2024-07-30", "team_id": 2, "team_member_ids": [2, 7],
     "budget": 30000, "spent": 13500, "manager": "Selamawit Assefa",
     "created_at": "2024-01-20T00:00:00", "updated_at": "2024-03-10T00:00:00"},
    {"id": 3, "name": "API Migration", "status": "completed", "progress": 100, "priority": "high",
     "description": "Migrate legacy APIs to microservices architecture",
     "start_date": "2023-11-01", "deadline": "2024-03-01", "team_id": 1, "team_member_ids": [1, 3],
     "budget": 40000, "spent": 38000, "manager": "Mikias Getachew",
     "created_at": "2023-10-15T00:00:00", "updated_at": "2024-03-01T00:00:00"},
    {"id": 4, "name": "Payment Integration", "status": "active", "progress": 60, "priority": "medium",
     "description": "Integrate new payment gateway with enhanced security",
     "start_date": "2024-01-20", "deadline": "2024-05-20", "team_id": 4, "team_member_ids": [5, 9],
     "budget": 25000, "spent": 15000, "manager": "Bereket Tadesse",
     "created_at": "2024-01-10T00:00:00", "updated_at": "2024-03-12T00:00:00"},
]

TASKS: list[dict[str, Any]] = [
    {"id": 1, "title": "Fix login authentication bug", "project_id": 1, "assignee_id": 1, "team_id": 1,
     "description": "Fix the authentication bug in the login flow that occurs when users try "
                    "to login with incorrect credentials multiple times.",
     "priority": "high", "deadline": "2024-03-15", "progress": 80, "status": "in-progress",
     "estimated_hours": 8, "actual_hours": 6, "tags": ["bug", "authentication", "security"],
     "created_at": "2024-02-20T00:00:00", "updated_at": "2024-03-10T00:00:00"},
    {"id": 2, "title": "Design homepage mockups", "project_id": 2, "assignee_id": 2, "team_id": 2,
     "description": "Create modern homepage mockups with improved user experience and responsive design",
     "priority": "medium", "deadline": "2024-03-20", "progress": 60, "status": "in-progress",
     "estimated_hours": 12, "actual_hours": 8, "tags": ["design", "ui", "homepage"],
     "created_at": "2024-02-25T00:00:00", "updated_at": "2024-03-12T00:00:00"},
    {"id": 3, "title": "Write API documentation", "project_id": 3, "assignee_id": 3, "team_id": 1,
     "description": "Document all API endpoints with examples and usage instructions",
     "priority": "low", "deadline": "2024-03-01", "progress": 100, "status": "completed",
     "estimated_hours": 6, "actual_hours": 6, "tags": ["documentation", "api", "backend"],
     "created_at": "2024-01-15T00:00:00", "updated_at": "2024-03-01T00:00:00"},
    {"id": 4, "title": "Database optimization", "project_id": 4, "assignee_id": 4, "team_id": 3,
     "description": "Optimize database queries and improve performance for payment processing",
     "priority": "high", "deadline": "2024-03-10", "progress": 40, "status": "in-progress",
     "estimated_hours": 10, "actual_hours": 4, "tags": ["database", "performance", "optimization"],
     "created_at": "2024-02-10T00:00:00", "updated_at": "2024-03-05T00:00:00"},
    {"id": 5, "title": "Mobile testing phase 2", "project_id": 1, "assignee_id": 1, "team_id": 1,
     "description": "Conduct second phase of mobile application testing on multiple devices",
     "priority": "medium", "deadline": "2024-03-25", "progress": 20, "status": "in-progress",
     "estimated_hours": 16, "actual_hours": 3, "tags": ["testing", "mobile", "quality"],
     "created_at": "2024-03-01T00:00:00", "updated_at": "2024-03-08T00:00:00"},
]


DEMO_COLLECTIONS: dict[str, list[dict[str, Any]]] = {
    "teamMembers": TEAM_MEMBERS,
    "teams": TEAMS,
    "managerProjects": PROJECTS,
    "managerTasks": TASKS,
}


def demo_collection(key: str) -> list[dict[str, Any]]:
    return deepcopy(DEMO_COLLECTIONS.get(key, []))
