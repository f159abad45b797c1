import django.db.models.deletion
from django.conf import settings
from django.db import migrations
from django.db import models

import sp_ops.attendance.models

REQUEST_STATUS_CHOICES = [
    ("Pending", "Pending"),
    ("Approved", "Approved"),
    ("Rejected", "Rejected"),
]
DAY_STATUS_CHOICES = [
    ("Absent", "Absent"),
    ("Present", "Present"),
    ("Half Day", "Half Day"),
    ("On Leave", "On Leave"),
    ("Pending Check-In", "Pending Check-In"),
    ("Pending Check-Out", "Pending Check-Out"),
    ("Pending Half-Day", "Pending Half-Day"),
    ("Pending Leave", "Pending Leave"),
    ("Checked-Out", "Checked-Out"),
    ("Rejected", "Rejected"),
    ("Holiday", "Holiday"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("employees", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AttendanceRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("date", models.DateField()),
                ("check_in_time", models.DateTimeField(blank=True, null=True)),
                (
                    "check_in_status",
                    models.CharField(
                        blank=True,
                        choices=REQUEST_STATUS_CHOICES,
                        max_length=16,
                        null=True,
                    ),
                ),
                ("check_in_remarks", models.TextField(blank=True)),
                ("check_out_time", models.DateTimeField(blank=True, null=True)),
                (
                    "check_out_status",
                    models.CharField(
                        blank=True,
                        choices=REQUEST_STATUS_CHOICES,
                        max_length=16,
                        null=True,
                    ),
                ),
                ("check_out_remarks", models.TextField(blank=True)),
                ("half_day_requested", models.BooleanField(default=False)),
                (
                    "half_day_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("First Half", "First Half"),
                            ("Second Half", "Second Half"),
                        ],
                        max_length=16,
                    ),
                ),
                ("half_day_reason", models.TextField(blank=True)),
                (
                    "half_day_attachment",
                    models.FileField(
                        blank=True,
                        upload_to=sp_ops.attendance.models.request_attachment_upload_to,
                    ),
                ),
                (
                    "half_day_status",
                    models.CharField(
                        blank=True,
                        choices=REQUEST_STATUS_CHOICES,
                        max_length=16,
                        null=True,
                    ),
                ),
                ("leave_requested", models.BooleanField(default=False)),
                ("leave_reason", models.TextField(blank=True)),
                (
                    "leave_attachment",
                    models.FileField(
                        blank=True,
                        upload_to=sp_ops.attendance.models.request_attachment_upload_to,
                    ),
                ),
                (
                    "leave_status",
                    models.CharField(
                        blank=True,
                        choices=REQUEST_STATUS_CHOICES,
                        max_length=16,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=DAY_STATUS_CHOICES, default="Absent", max_length=32
                    ),
                ),
                (
                    "manual_status",
                    models.CharField(
                        blank=True, choices=DAY_STATUS_CHOICES, max_length=32
                    ),
                ),
                (
                    "last_transition",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("", "None"),
                            ("check_in", "Check-in"),
                            ("check_out", "Check-out"),
                            ("half_day", "Half day"),
                            ("leave", "Leave"),
                            ("manual", "Manual"),
                        ],
                        default="",
                        max_length=16,
                    ),
                ),
                ("duration", models.PositiveIntegerField(default=0)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("admin_remarks", models.TextField(blank=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance_records",
                        to="employees.employee",
                    ),
                ),
            ],
            options={"ordering": ["-date", "-id"]},
        ),
        migrations.AddConstraint(
            model_name="attendancerecord",
            constraint=models.UniqueConstraint(
                fields=("employee", "date"), name="uniq_attendance_employee_date"
            ),
        ),
        migrations.CreateModel(
            name="AttendanceAction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("action", models.CharField(max_length=64)),
                ("timestamp", models.DateTimeField()),
                (
                    "admin",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="action_log",
                        to="attendance.attendancerecord",
                    ),
                ),
            ],
            options={"ordering": ["timestamp", "id"]},
        ),
    ]
