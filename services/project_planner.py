"""Project plan templates for the AI tools endpoints.

Builds a week-by-week plan, resource list, risk register and milestones for
a project category from fixed templates.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from models.quote import ProjectType


@dataclass
class PlanPhase:
    """Phase in a project plan. `week` is the 1-based start week."""
    week: int
    task: str
    duration: int
    team_size: int


@dataclass
class Milestone:
    milestone: str
    week: int
    status: str = "planned"


@dataclass
class ProjectPlan:
    """Generated plan for a project."""
    project_name: str
    project_type: str
    start_date: Optional[str]
    duration: Optional[Any]
    team_size: Optional[Any]
    timeline: List[PlanPhase] = field(default_factory=list)
    resources: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)
    milestones: List[Milestone] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase dict for the API response."""
        return {
            "projectName": self.project_name,
            "projectType": self.project_type,
            "startDate": self.start_date,
            "duration": self.duration,
            "teamSize": self.team_size,
            "timeline": [
                {
                    "week": phase.week,
                    "task": phase.task,
                    "duration": phase.duration,
                    "teamSize": phase.team_size,
                }
                for phase in self.timeline
            ],
            "resources": list(self.resources),
            "risks": list(self.risks),
            "milestones": [asdict(milestone) for milestone in self.milestones],
        }


# (task, duration in weeks, team size)
PHASE_TEMPLATES: Dict[ProjectType, List[tuple]] = {
    ProjectType.ISOLATIEWERKEN: [
        ("Voorbereiding en opmeting", 1, 1),
        ("Materiaal bestelling en levering", 1, 0),
        ("Isolatie installatie", 2, 2),
        ("Afdichting en afwerking", 1, 2),
        ("Controle en oplevering", 1, 1),
    ],
    ProjectType.RENOVATIEWERKEN: [
        ("Planning en vergunningen", 2, 1),
        ("Sloop en voorbereiding", 3, 3),
        ("Bouw en constructie", 6, 4),
        ("Afwerking en installaties", 4, 3),
        ("Oplevering en nazorg", 1, 2),
    ],
    ProjectType.PLATEDAKKEN: [
        ("Inspectie en opmeting", 1, 1),
        ("Materiaal bestelling", 1, 0),
        ("Dakbedekking installatie", 3, 3),
        ("Goten en afvoeren", 1, 2),
        ("Controle en garantie", 1, 1),
    ],
    ProjectType.RAMEN_DEUREN: [
        ("Opmeting en bestelling", 1, 1),
        ("Productie en levering", 2, 0),
        ("Installatie ramen", 2, 2),
        ("Installatie deuren", 1, 2),
        ("Afwerking en controle", 1, 1),
    ],
    ProjectType.TUINAANLEG: [
        ("Ontwerp en planning", 1, 1),
        ("Grondwerk en voorbereiding", 2, 2),
        ("Beplanting en aanleg", 3, 3),
        ("Bestrating en verharding", 2, 2),
        ("Afronding en onderhoud", 1, 1),
    ],
}

BASE_RESOURCES = [
    "Project manager",
    "Vakmensen",
    "Materiaal en gereedschap",
    "Veiligheidsuitrusting",
]

SPECIFIC_RESOURCES: Dict[ProjectType, List[str]] = {
    ProjectType.ISOLATIEWERKEN: ["Isolatiemateriaal", "Afdichtingsmiddelen", "Meetapparatuur"],
    ProjectType.RENOVATIEWERKEN: ["Bouwmateriaal", "Gereedschap", "Hijsmateriaal"],
    ProjectType.PLATEDAKKEN: ["Dakbedekking", "Lijm en bevestigingsmaterialen", "Veiligheidsmateriaal"],
    ProjectType.RAMEN_DEUREN: ["Ramen en deuren", "Kozijnen", "Installatiegereedschap"],
    ProjectType.TUINAANLEG: ["Planten en beplanting", "Grond en bemesting", "Bestrating"],
}

COMMON_RISKS = [
    "Weersomstandigheden",
    "Leveringsproblemen",
    "Onvoorziene constructieproblemen",
]

SPECIFIC_RISKS: Dict[ProjectType, List[str]] = {
    ProjectType.ISOLATIEWERKEN: ["Vochtproblemen", "Bestaande constructie schade"],
    ProjectType.RENOVATIEWERKEN: ["Asbest", "Fundering problemen"],
    ProjectType.PLATEDAKKEN: ["Lekkage", "Wind en stormschade"],
    ProjectType.RAMEN_DEUREN: ["Maatvoering", "Kozijn problemen"],
    ProjectType.TUINAANLEG: ["Bodemkwaliteit", "Drainage problemen"],
}


def get_project_phases(project_type: str) -> List[PlanPhase]:
    """Phases with cumulative start weeks; unknown types use the renovation template."""
    template = PHASE_TEMPLATES.get(
        ProjectType.parse(project_type),
        PHASE_TEMPLATES[ProjectType.RENOVATIEWERKEN],
    )

    phases = []
    current_week = 1
    for task, duration, team_size in template:
        phases.append(PlanPhase(week=current_week, task=task, duration=duration, team_size=team_size))
        current_week += duration
    return phases


def get_project_resources(project_type: str) -> List[str]:
    return BASE_RESOURCES + SPECIFIC_RESOURCES.get(ProjectType.parse(project_type), [])


def get_project_risks(project_type: str) -> List[str]:
    return COMMON_RISKS + SPECIFIC_RISKS.get(ProjectType.parse(project_type), [])


def get_project_milestones(phases: List[PlanPhase]) -> List[Milestone]:
    return [Milestone(milestone=phase.task, week=phase.week) for phase in phases]


def create_project_plan(
    project_name: str,
    project_type: str,
    start_date: Optional[str] = None,
    duration: Optional[Any] = None,
    team_size: Optional[Any] = None,
) -> ProjectPlan:
    """Create a project plan from the category templates."""
    phases = get_project_phases(project_type)
    return ProjectPlan(
        project_name=project_name,
        project_type=project_type,
        start_date=start_date,
        duration=duration,
        team_size=team_size,
        timeline=phases,
        resources=get_project_resources(project_type),
        risks=get_project_risks(project_type),
        milestones=get_project_milestones(phases),
    )
