from rest_framework import serializers

from reporting.models import InspectionEntry
from .fields import iso
from .user import user_brief

STATUS_VALUES = [s for s, _ in InspectionEntry.STATUS_CHOICES]

# columns the ship staff fill in; everything else on an entry is office only
SHIP_STAFF_FIELDS = (
    'srNo',
    'deficiency',
    'mastersCauseAnalysis',
    'correctiveAction',
    'preventiveAction',
    'completionDate',
)
OFFICE_FIELDS = ('companyAnalysis', 'status', 'officeSignUserId', 'officeSignDate')

ENTRY_FIELD_MAP = {
    'srNo': 'sr_no',
    'deficiency': 'deficiency',
    'mastersCauseAnalysis': 'masters_cause_analysis',
    'correctiveAction': 'corrective_action',
    'preventiveAction': 'preventive_action',
    'completionDate': 'completion_date',
    'companyAnalysis': 'company_analysis',
    'status': 'status',
    'officeSignUserId': 'office_sign_user_id',
    'officeSignDate': 'office_sign_date',
}

REPORT_FIELD_MAP = {
    'title': 'title',
    'shipFileNo': 'ship_file_no',
    'officeFileNo': 'office_file_no',
    'revisionNo': 'revision_no',
    'formNo': 'form_no',
    'applicableFomSections': 'applicable_fom_sections',
    'inspectedBy': 'inspected_by',
    'inspectionDate': 'inspection_date',
}


class EntrySerializer(serializers.Serializer):
    srNo = serializers.CharField(max_length=5)
    deficiency = serializers.CharField(max_length=1000)
    mastersCauseAnalysis = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=1000)
    correctiveAction = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=1000)
    preventiveAction = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=1000)
    completionDate = serializers.DateField(required=False, allow_null=True)
    companyAnalysis = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=1000)
    status = serializers.ChoiceField(choices=STATUS_VALUES, required=False)
    officeSignUserId = serializers.IntegerField(required=False, allow_null=True)
    officeSignDate = serializers.DateTimeField(required=False, allow_null=True)


class EntryUpdateSerializer(EntrySerializer):
    srNo = serializers.CharField(required=False, max_length=5)
    deficiency = serializers.CharField(required=False, max_length=1000)


class InspectionCreateSerializer(serializers.Serializer):
    vesselId = serializers.IntegerField(required=False, allow_null=True)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    shipFileNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)
    officeFileNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=50)
    revisionNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)
    formNo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)
    applicableFomSections = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    inspectedBy = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=100)
    inspectionDate = serializers.DateField(required=False, allow_null=True)
    entries = EntrySerializer(many=True, required=False)


class InspectionUpdateSerializer(InspectionCreateSerializer):
    pass


class InspectionListQuerySerializer(serializers.Serializer):
    vesselId = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=STATUS_VALUES, required=False)


def entry_dict(entry, *, include_signer: bool = False) -> dict:
    data = {
        'id': entry.id,
        'reportId': entry.report_id,
        'srNo': entry.sr_no,
        'deficiency': entry.deficiency,
        'mastersCauseAnalysis': entry.masters_cause_analysis,
        'correctiveAction': entry.corrective_action,
        'preventiveAction': entry.preventive_action,
        'completionDate': iso(entry.completion_date),
        'companyAnalysis': entry.company_analysis,
        'status': entry.status,
        'officeSignUserId': entry.office_sign_user_id,
        'officeSignDate': iso(entry.office_sign_date),
        'createdAt': iso(entry.created_at),
        'updatedAt': iso(entry.updated_at),
    }
    if include_signer:
        signer = entry.office_sign_user
        data['officeSignUser'] = (
            {'id': signer.id, 'name': signer.name, 'signatureImage': signer.signature_image} if signer else None
        )
    return data


def report_dict(report) -> dict:
    return {
        'id': report.id,
        'vesselId': report.vessel_id,
        'organizationId': report.organization_id,
        'createdById': report.created_by_id,
        'title': report.title,
        'shipFileNo': report.ship_file_no,
        'officeFileNo': report.office_file_no,
        'revisionNo': report.revision_no,
        'formNo': report.form_no,
        'applicableFomSections': report.applicable_fom_sections,
        'inspectedBy': report.inspected_by,
        'inspectionDate': iso(report.inspection_date),
        'createdAt': iso(report.created_at),
        'updatedAt': iso(report.updated_at),
    }


def report_detail_dict(report) -> dict:
    """Report with vessel, creator and its entries ordered by serial number."""
    data = report_dict(report)
    vessel = report.vessel
    data['vessel'] = {'id': vessel.id, 'name': vessel.name, 'imoNumber': vessel.imo_number}
    data['createdBy'] = user_brief(report.created_by)
    data['entries'] = [entry_dict(e, include_signer=True) for e in report.entries.all()]
    return data
