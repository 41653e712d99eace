# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from payroll.models import AttendanceRecord


class AttendanceRecordReadSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    posting_status_display = serializers.CharField(source="get_posting_status_display", read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            "id", "employee_id", "employee_name", "attendance_date", "day",
            "time_in", "time_out", "break_out", "break_in", "next_day_timeout", "is_nightshift",
            "late_minutes", "undertime_minutes", "hours_worked",
            "overtime", "travel_order", "slvl", "holiday", "ot_reg_holiday", "ot_special_holiday",
            "retromultiplier", "restday", "offset", "trip", "ct", "cs", "ob",
            "source", "remarks",
            "posting_status", "posting_status_display", "posted_at", "posted_by",
            "created_at", "updated_at",
        ]


def _time():
    # ISO datetime or "HH:MM[:SS]"; parsed by the service against attendance_date
    return serializers.CharField(required=False, allow_null=True, allow_blank=True)

def _num(max_digits: int = 6):
    return serializers.DecimalField(max_digits=max_digits, decimal_places=2, required=False, allow_null=True)


class AttendanceWriteSerializer(serializers.Serializer):
    day = serializers.CharField(required=False, allow_blank=True)
    time_in = _time()
    time_out = _time()
    break_out = _time()
    break_in = _time()
    next_day_timeout = _time()
    is_nightshift = serializers.BooleanField(required=False)

    late_minutes = _num(7)
    undertime_minutes = _num(7)
    hours_worked = _num()

    overtime = _num()
    travel_order = _num()
    slvl = serializers.DecimalField(max_digits=4, decimal_places=2, required=False, allow_null=True, min_value=0)
    holiday = _num()
    ot_reg_holiday = _num()
    ot_special_holiday = _num()
    retromultiplier = _num(10)
    restday = serializers.BooleanField(required=False)
    offset = _num()
    trip = _num()
    ct = serializers.BooleanField(required=False)
    cs = serializers.BooleanField(required=False)
    ob = serializers.BooleanField(required=False)
    source = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True)


class AttendanceCreateSerializer(AttendanceWriteSerializer):
    employee_id = serializers.IntegerField()
    attendance_date = serializers.DateField()


class AttendanceUpdateSerializer(AttendanceWriteSerializer):
    pass
