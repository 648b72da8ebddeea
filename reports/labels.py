# reports/labels.py
"""
Display strings for exported reports, keyed by language code.

English is the reference table; a missing Arabic key falls back to it.
"""

LABELS = {
    'en': {
        # Report titles
        'report.patients': 'Patients Report',
        'report.appointments': 'Appointments Report',
        'report.financial': 'Financial Report',
        'report.inventory': 'Inventory Report',
        'report.overview': 'Comprehensive Report',

        # File name stems
        'file.patients': 'Patients_Report',
        'file.appointments': 'Appointments_Report',
        'file.financial': 'Financial_Report',
        'file.inventory': 'Inventory_Report',
        'file.overview': 'Comprehensive_Report',
        'file.other': 'Report_{type}',

        # Section titles
        'section.summary': 'Summary',
        'section.filter': 'Applied Filters',
        'section.age_distribution': 'Age Distribution',
        'section.gender_distribution': 'Gender Distribution',
        'section.patient_details': 'Patient Details',
        'section.status_distribution': 'Status Distribution',
        'section.treatment_distribution': 'Appointments by Treatment',
        'section.appointment_details': 'Appointment Details',
        'section.payment_methods': 'Payment Methods',
        'section.payment_status': 'Payments by Status',
        'section.monthly_revenue': 'Monthly Revenue',
        'section.patient_balances': 'Patient Balances',
        'section.payment_details': 'Payment Details',
        'section.category_distribution': 'Items by Category',
        'section.top_categories': 'Top Categories',
        'section.inventory_details': 'Inventory Details',
        'section.charts': 'Charts',

        # Summary items
        'summary.total_patients': 'Total patients',
        'summary.new_patients_this_month': 'New patients this month',
        'summary.active_patients': 'Active patients',
        'summary.average_age': 'Average age',
        'summary.total_appointments': 'Total appointments',
        'summary.completed_appointments': 'Completed appointments',
        'summary.cancelled_appointments': 'Cancelled appointments',
        'summary.no_show_appointments': 'No-shows',
        'summary.scheduled_appointments': 'Scheduled appointments',
        'summary.in_progress_appointments': 'In progress',
        'summary.attendance_rate': 'Attendance rate',
        'summary.cancellation_rate': 'Cancellation rate',
        'summary.no_show_rate': 'No-show rate',
        'summary.completed_value': 'Value of completed appointments',
        'summary.total_payments': 'Total payments',
        'summary.total_revenue': 'Total revenue',
        'summary.completed_payments': 'Completed payments',
        'summary.pending_payments': 'Pending payments',
        'summary.overdue_payments': 'Overdue payments',
        'summary.outstanding_balance': 'Outstanding balance',
        'summary.partial_payments': 'Partial payments received',
        'summary.partial_payments_count': 'Number of partial payments',
        'summary.partial_remaining': 'Remaining on partial payments',
        'summary.remaining_balance': 'Total remaining balance',
        'summary.average_payment': 'Average payment',
        'summary.total_items': 'Total items',
        'summary.total_quantity': 'Total quantity',
        'summary.total_value': 'Total value',
        'summary.low_stock_items': 'Low stock items',
        'summary.out_of_stock_items': 'Out of stock items',
        'summary.expired_items': 'Expired items',
        'summary.expiring_soon_items': 'Expiring soon',
        'summary.data_range': 'Data range',
        'summary.data_count': 'Exported records',

        # Column headers
        'column.age_group': 'Age group',
        'column.gender': 'Gender',
        'column.status': 'Status',
        'column.treatment': 'Treatment',
        'column.method': 'Payment method',
        'column.category': 'Category',
        'column.month': 'Month',
        'column.count': 'Count',
        'column.percentage': 'Percentage',
        'column.amount': 'Amount',
        'column.value': 'Value',
        'column.revenue': 'Revenue',
        'column.serial_number': 'Serial No.',
        'column.full_name': 'Full name',
        'column.age': 'Age',
        'column.phone': 'Phone',
        'column.email': 'Email',
        'column.registered': 'Registered',
        'column.date': 'Date',
        'column.patient': 'Patient',
        'column.cost': 'Cost',
        'column.receipt': 'Receipt',
        'column.description': 'Description',
        'column.total_due': 'Total due',
        'column.paid': 'Paid',
        'column.remaining': 'Remaining',
        'column.name': 'Name',
        'column.quantity': 'Quantity',
        'column.unit': 'Unit',
        'column.cost_per_unit': 'Cost per unit',
        'column.expiry': 'Expiry date',
        'column.supplier': 'Supplier',

        # Choice values
        'choice.unknown': 'Unspecified',
        'age.children': 'Children (0-12)',
        'age.teens': 'Teens (13-19)',
        'age.adults': 'Adults (20-59)',
        'age.seniors': 'Seniors (60+)',
        'gender.male': 'Male',
        'gender.female': 'Female',
        'gender.other': 'Other',
        'status.scheduled': 'Scheduled',
        'status.completed': 'Completed',
        'status.cancelled': 'Cancelled',
        'status.no_show': 'No-show',
        'status.in_progress': 'In progress',
        'status.partial': 'Partial',
        'status.pending': 'Pending',
        'status.overdue': 'Overdue',
        'status.refunded': 'Refunded',
        'status.failed': 'Failed',
        'method.cash': 'Cash',
        'method.card': 'Credit card',
        'method.bank_transfer': 'Bank transfer',
        'method.insurance': 'Insurance',
        'method.installment': 'Installment',

        # Misc
        'unit.years': 'years',
        'text.report_date': 'Report date',
        'text.generated_at': 'Generated at',
        'text.footer': 'Generated by the clinic management system',
        'text.no_data': 'No data available',
        'text.more_rows': '{count} more rows not shown',
        'error.export_failed': 'Failed to export the report to {format}',
    },
    'ar': {
        'report.patients': 'تقرير المرضى',
        'report.appointments': 'تقرير المواعيد',
        'report.financial': 'التقرير المالي',
        'report.inventory': 'تقرير المخزون',
        'report.overview': 'التقرير الشامل',

        'file.patients': 'تقرير_المرضى',
        'file.appointments': 'تقرير_المواعيد',
        'file.financial': 'التقرير_المالي',
        'file.inventory': 'تقرير_المخزون',
        'file.overview': 'التقرير_الشامل',
        'file.other': 'تقرير_{type}',

        'section.summary': 'ملخص الإحصائيات',
        'section.filter': 'معلومات الفلترة المطبقة',
        'section.age_distribution': 'توزيع الأعمار',
        'section.gender_distribution': 'توزيع الجنس',
        'section.patient_details': 'تفاصيل المرضى',
        'section.status_distribution': 'توزيع حالات المواعيد',
        'section.treatment_distribution': 'توزيع المواعيد حسب نوع العلاج',
        'section.appointment_details': 'تفاصيل المواعيد',
        'section.payment_methods': 'توزيع طرق الدفع',
        'section.payment_status': 'توزيع المدفوعات حسب الحالة',
        'section.monthly_revenue': 'الإيرادات الشهرية',
        'section.patient_balances': 'أرصدة المرضى',
        'section.payment_details': 'تفاصيل المعاملات المالية',
        'section.category_distribution': 'توزيع الأصناف حسب الفئة',
        'section.top_categories': 'أعلى الفئات',
        'section.inventory_details': 'تفاصيل المخزون',
        'section.charts': 'الرسوم البيانية',

        'summary.total_patients': 'إجمالي المرضى',
        'summary.new_patients_this_month': 'المرضى الجدد هذا الشهر',
        'summary.active_patients': 'المرضى النشطون',
        'summary.average_age': 'متوسط العمر',
        'summary.total_appointments': 'إجمالي المواعيد',
        'summary.completed_appointments': 'المواعيد المكتملة',
        'summary.cancelled_appointments': 'المواعيد الملغية',
        'summary.no_show_appointments': 'عدم الحضور',
        'summary.scheduled_appointments': 'المواعيد المجدولة',
        'summary.in_progress_appointments': 'قيد التنفيذ',
        'summary.attendance_rate': 'معدل الحضور',
        'summary.cancellation_rate': 'معدل الإلغاء',
        'summary.no_show_rate': 'معدل عدم الحضور',
        'summary.completed_value': 'قيمة المواعيد المكتملة',
        'summary.total_payments': 'عدد المدفوعات',
        'summary.total_revenue': 'إجمالي الإيرادات',
        'summary.completed_payments': 'المدفوعات المكتملة',
        'summary.pending_payments': 'المدفوعات المعلقة',
        'summary.overdue_payments': 'المدفوعات المتأخرة',
        'summary.outstanding_balance': 'الرصيد المستحق الإجمالي',
        'summary.partial_payments': 'المدفوعات الجزئية المستلمة',
        'summary.partial_payments_count': 'عدد الدفعات الجزئية',
        'summary.partial_remaining': 'المبالغ المتبقية من الدفعات الجزئية',
        'summary.remaining_balance': 'إجمالي المبالغ المتبقية',
        'summary.average_payment': 'متوسط الدفعة',
        'summary.total_items': 'إجمالي العناصر',
        'summary.total_quantity': 'إجمالي الكمية',
        'summary.total_value': 'القيمة الإجمالية',
        'summary.low_stock_items': 'عناصر منخفضة المخزون',
        'summary.out_of_stock_items': 'عناصر نفدت من المخزون',
        'summary.expired_items': 'عناصر منتهية الصلاحية',
        'summary.expiring_soon_items': 'عناصر قاربت على الانتهاء',
        'summary.data_range': 'نطاق البيانات',
        'summary.data_count': 'عدد السجلات المصدرة',

        'column.age_group': 'الفئة العمرية',
        'column.gender': 'الجنس',
        'column.status': 'الحالة',
        'column.treatment': 'نوع العلاج',
        'column.method': 'طريقة الدفع',
        'column.category': 'الفئة',
        'column.month': 'الشهر',
        'column.count': 'العدد',
        'column.percentage': 'النسبة المئوية',
        'column.amount': 'المبلغ',
        'column.value': 'القيمة',
        'column.revenue': 'الإيرادات',
        'column.serial_number': 'الرقم التسلسلي',
        'column.full_name': 'الاسم الكامل',
        'column.age': 'العمر',
        'column.phone': 'الهاتف',
        'column.email': 'البريد الإلكتروني',
        'column.registered': 'تاريخ التسجيل',
        'column.date': 'التاريخ',
        'column.patient': 'اسم المريض',
        'column.cost': 'التكلفة',
        'column.receipt': 'رقم الإيصال',
        'column.description': 'الوصف',
        'column.total_due': 'المبلغ الإجمالي',
        'column.paid': 'المبلغ المدفوع',
        'column.remaining': 'المبلغ المتبقي',
        'column.name': 'الاسم',
        'column.quantity': 'الكمية',
        'column.unit': 'الوحدة',
        'column.cost_per_unit': 'سعر الوحدة',
        'column.expiry': 'تاريخ الانتهاء',
        'column.supplier': 'المورد',

        'choice.unknown': 'غير محدد',
        'age.children': 'أطفال (0-12)',
        'age.teens': 'مراهقون (13-19)',
        'age.adults': 'بالغون (20-59)',
        'age.seniors': 'كبار السن (60+)',
        'gender.male': 'ذكر',
        'gender.female': 'أنثى',
        'gender.other': 'آخر',
        'status.scheduled': 'مجدول',
        'status.completed': 'مكتمل',
        'status.cancelled': 'ملغي',
        'status.no_show': 'عدم حضور',
        'status.in_progress': 'قيد التنفيذ',
        'status.partial': 'جزئي',
        'status.pending': 'معلق',
        'status.overdue': 'متأخر',
        'status.refunded': 'مسترد',
        'status.failed': 'فاشل',
        'method.cash': 'نقدي',
        'method.card': 'بطاقة ائتمان',
        'method.bank_transfer': 'تحويل بنكي',
        'method.insurance': 'تأمين',
        'method.installment': 'تقسيط',

        'unit.years': 'سنة',
        'text.report_date': 'تاريخ التقرير',
        'text.generated_at': 'وقت الإنشاء',
        'text.footer': 'تم إنشاء هذا التقرير بواسطة نظام إدارة العيادة',
        'text.no_data': 'لا توجد بيانات متاحة',
        'text.more_rows': 'لم يتم عرض {count} صفوف إضافية',
        'error.export_failed': 'فشل في تصدير التقرير إلى {format}',
    },
}

RTL_LANGUAGES = ('ar',)


class Labels:
    """Label lookup bound to one language."""

    def __init__(self, language='en'):
        self.language = language if language in LABELS else 'en'
        self._table = LABELS[self.language]

    @property
    def is_rtl(self):
        return self.language in RTL_LANGUAGES

    def get(self, key, **kwargs):
        text = self._table.get(key)
        if text is None:
            text = LABELS['en'].get(key, key)
        if kwargs:
            text = text.format(**kwargs)
        return text

    __call__ = get

    def choice(self, prefix, value):
        """Translate a status/method/gender value, keeping unknown values as-is."""
        if value in (None, '', 'unknown'):
            return self.get('choice.unknown')
        key = f'{prefix}.{value}'
        if key in self._table or key in LABELS['en']:
            return self.get(key)
        return str(value)
