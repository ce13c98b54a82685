import logging
from typing import List, Optional

from app.core.auth import roles
from app.core.exceptions import DuplicateError, ForbiddenError, NotFoundError, PreconditionError, ValidationError
from app.core.models.project import Project, ProjectMember, Task
from app.core.models.rbac import User
from app.core.schemas.auth import Principal
from app.core.schemas.project import ProjectCreate, ProjectMemberRequest, ProjectUpdate
from app.shared.timezone import get_plant_now

logger = logging.getLogger(__name__)


class ProjectService:

    @staticmethod
    def can_manage(project: Project, principal: Principal) -> bool:
        return project.owner == principal.user_id or principal.has_role(roles.ADMIN)

    @staticmethod
    async def _require_users(user_ids: List[str]) -> None:
        if not user_ids:
            return
        found = await User.find({"_id": {"$in": list(user_ids)}}).to_list()
        missing = set(user_ids) - {u.id for u in found}
        if missing:
            raise ValidationError(f"Unknown users: {', '.join(sorted(missing))}")

    @staticmethod
    async def list_projects(
        principal: Principal,
        status: Optional[str] = None,
        owner: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Project]:
        """Projects visible to the caller (all for admins, owned or joined otherwise)."""
        if principal.has_role(roles.ADMIN):
            query = Project.find_all()
        else:
            query = Project.find(
                {"$or": [{"owner": principal.user_id}, {"members.user_id": principal.user_id}]}
            )
        projects = await query.sort("-created_at").to_list()

        if status:
            projects = [p for p in projects if p.status == status]
        if owner:
            projects = [p for p in projects if p.owner == owner]
        if search:
            term = search.lower()
            projects = [p for p in projects if term in p.name.lower() or term in p.description.lower()]
        return projects

    @staticmethod
    async def get_project(project_id: str) -> Project:
        project = await Project.get(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    @staticmethod
    async def get_visible_project(project_id: str, principal: Principal) -> Project:
        project = await ProjectService.get_project(project_id)
        if not (project.has_member(principal.user_id) or principal.has_role(roles.ADMIN)):
            raise ForbiddenError("Access denied: you are not part of this project")
        return project

    @staticmethod
    async def create_project(data: ProjectCreate, principal: Principal) -> Project:
        await ProjectService._require_users([m.user_id for m in data.members])

        project = Project(
            name=data.name,
            description=data.description,
            status=data.status,
            owner=principal.user_id,
            members=[ProjectMember(user_id=m.user_id, role=m.role) for m in data.members],
            start_date=data.start_date or get_plant_now(),
            end_date=data.end_date,
        )
        await project.insert()
        logger.info(f"Project {project.id} created by {principal.user_id}")
        return project

    @staticmethod
    async def update_project(project_id: str, data: ProjectUpdate, principal: Principal) -> Project:
        project = await ProjectService.get_project(project_id)
        if not ProjectService.can_manage(project, principal):
            raise ForbiddenError("Insufficient permissions to update this project")

        updates = data.model_dump(exclude_unset=True, exclude={"members"})
        for key, value in updates.items():
            setattr(project, key, value)
        if data.members is not None:
            await ProjectService._require_users([m.user_id for m in data.members])
            project.members = [ProjectMember(user_id=m.user_id, role=m.role) for m in data.members]

        project.touch()
        await project.save()
        return project

    @staticmethod
    async def delete_project(project_id: str, principal: Principal) -> None:
        project = await ProjectService.get_project(project_id)
        if not ProjectService.can_manage(project, principal):
            raise ForbiddenError("Insufficient permissions to delete this project")

        await Task.find(Task.project_id == project.id).delete()
        await project.delete()
        logger.info(f"Project {project_id} deleted by {principal.user_id}")

    @staticmethod
    async def add_member(project_id: str, member: ProjectMemberRequest, principal: Principal) -> Project:
        project = await ProjectService.get_project(project_id)
        if not ProjectService.can_manage(project, principal):
            raise ForbiddenError("Insufficient permissions to manage project members")
        if any(m.user_id == member.user_id for m in project.members):
            raise DuplicateError("User is already a member of this project")
        await ProjectService._require_users([member.user_id])

        project.members.append(ProjectMember(user_id=member.user_id, role=member.role))
        project.touch()
        await project.save()
        return project

    @staticmethod
    async def remove_member(project_id: str, user_id: str, principal: Principal) -> Project:
        project = await ProjectService.get_project(project_id)
        if not ProjectService.can_manage(project, principal):
            raise ForbiddenError("Insufficient permissions to manage project members")
        if project.owner == user_id:
            raise PreconditionError("Cannot remove project owner")

        remaining = [m for m in project.members if m.user_id != user_id]
        if len(remaining) == len(project.members):
            raise NotFoundError("User is not a member of this project")

        project.members = remaining
        project.touch()
        await project.save()
        return project

    @staticmethod
    async def list_my_projects(principal: Principal) -> List[Project]:
        return await Project.find(
            {"$or": [{"owner": principal.user_id}, {"members.user_id": principal.user_id}]}
        ).sort("-created_at").to_list()
