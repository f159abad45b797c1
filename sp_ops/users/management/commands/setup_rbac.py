from collections import defaultdict
from contextlib import suppress

from django.apps import apps
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.contrib.auth.models import Permission
from django.contrib.contenttypes.models import ContentType
from django.core.management.base import BaseCommand
from django.utils.translation import gettext as _

from sp_ops.users.api.permissions import ROLE_ADMIN
from sp_ops.users.api.permissions import ROLE_EMPLOYEE

REQUEST_ACTIONS = ("add", "view")
READ_ACTIONS = ("view",)

# Admin receives every permission of every target app.
ADMIN_APPS = ("attendance", "audit", "employees", "payroll", "users")

ROLE_APP_ACTIONS = {
    ROLE_EMPLOYEE: {
        "attendance": REQUEST_ACTIONS,
        "employees": READ_ACTIONS,
        "payroll": READ_ACTIONS,
    },
}


class Command(BaseCommand):
    help = _("Create the Admin and Employee groups with model permissions")

    def handle(self, *args, **options):
        user_model = get_user_model()
        models = self._collect_models(user_model)
        roles = self._build_roles(models, user_model)
        self._apply_roles(roles)
        self.stdout.write(self.style.SUCCESS("RBAC setup complete"))

    def _collect_models(self, user_model):
        seen_models: set[type] = set()
        collected: list[type] = []

        def add_model(model):
            if model not in seen_models:
                seen_models.add(model)
                collected.append(model)

        add_model(user_model)
        for label in sorted(ADMIN_APPS):
            for model in self._collect_app_models(label):
                add_model(model)
        return collected

    def _collect_app_models(self, label):
        with suppress(LookupError):
            app_config = apps.get_app_config(label)
            return list(app_config.get_models())
        return []

    def _build_roles(self, models, user_model):
        """Construct per-role permission id sets."""

        admin_perm_ids: set[int] = set()
        role_perm_ids: dict[str, set[int]] = defaultdict(set)

        for model in models:
            ct = ContentType.objects.get_for_model(model)
            model_perms = list(Permission.objects.filter(content_type=ct))
            if not model_perms:
                continue

            admin_perm_ids.update(perm.pk for perm in model_perms)

            model_name = model._meta.model_name  # noqa: SLF001
            app_label = model._meta.app_label  # noqa: SLF001
            perms_by_codename = {perm.codename: perm for perm in model_perms}

            for role_name, app_rules in ROLE_APP_ACTIONS.items():
                actions = app_rules.get(app_label)
                if actions:
                    self._add_actions(
                        role_perm_ids[role_name], perms_by_codename, model_name, actions
                    )

        # Employees keep read access to their own user record.
        employee_view_perm = Permission.objects.filter(
            content_type=ContentType.objects.get_for_model(user_model),
            codename=f"view_{user_model._meta.model_name}",  # noqa: SLF001
        ).first()
        if employee_view_perm:
            role_perm_ids[ROLE_EMPLOYEE].add(employee_view_perm.pk)

        roles = {ROLE_ADMIN: admin_perm_ids}
        roles.update(role_perm_ids)
        return roles

    def _add_actions(self, bucket, perms_by_codename, model_name, actions):
        for action in actions:
            perm = perms_by_codename.get(f"{action}_{model_name}")
            if perm:
                bucket.add(perm.pk)

    def _apply_roles(self, roles):
        for role_name, perm_ids in roles.items():
            group, _ = Group.objects.get_or_create(name=role_name)
            perms = Permission.objects.filter(pk__in=perm_ids)
            group.permissions.set(list(perms))
            msg = f"Ensured group '{role_name}' with permissions ({len(perm_ids)})"
            self.stdout.write(self.style.SUCCESS(msg))
