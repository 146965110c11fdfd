# Garante o registro de TODAS as models no mesmo registry
from alunos.db.base_class import Base # noqa
from alunos.models.audit_log import AuditLog # noqa
from alunos.models.student import Student # noqa

# IMPORTS com efeito colateral (não remova)
from alunos.models.user import Profile, User # noqa
