# Collection Names
COLLECTIONS = {
    'facilities': 'facilities',
    'users': 'users',
    'user_emails': 'user_emails',
    'service_management': 'service_management',
    'iot_service_management': 'iot_service_management',
    'floor_locations': 'floor_locations',
    'daily_checklists': 'daily_checklists',
    'hygiene_sections': 'hygiene_sections',
    'hygiene_checklists': 'hygiene_checklists',
    'rosters': 'rosters',
    'leave_planners': 'leave_planners',
    'shift_schedules': 'shift_schedules',
    'weekoff_planners': 'weekoff_planners',
    'service_providers': 'service_providers',
    'power_management': 'power_management',
    'water_tanks': 'water_tanks',
    'borewells': 'borewells',
    'cauvery_supplies': 'cauvery_supplies',
    'tankers': 'tankers',
    'stp_readings': 'stp_readings',
    'wtp_readings': 'wtp_readings',
    'swimming_pool_readings': 'swimming_pool_readings',
    'ro_plant_readings': 'ro_plant_readings',
}

# Collection Structure Documentation
COLLECTION_SCHEMAS = {
    'facilities': {
        'fields': ['tenant_id', 'site_name', 'city', 'location', 'client_name', 'position',
                   'contact_no', 'email', 'facility_type', 'additional_info', 'settings'],
        'required': ['tenant_id', 'site_name', 'city', 'location', 'client_name', 'position',
                     'contact_no', 'facility_type'],
        'indexes': ['tenant_id', 'city', 'facility_type']
    },
    'users': {
        'fields': ['email', 'password_hash', 'first_name', 'last_name', 'phone', 'role', 'status',
                   'verification_status', 'managed_facilities', 'permissions', 'profile', 'is_deleted'],
        'required': ['email', 'password_hash', 'first_name', 'role', 'status'],
        'indexes': ['email', 'role', 'status', 'managed_facilities']
    },
    # One document per lower-cased email, keyed by the email itself
    'user_emails': {
        'fields': ['user_id', 'email'],
        'required': ['user_id', 'email'],
        'indexes': []
    },
    'service_management': {
        'fields': ['facility_id', 'facility_name', 'facility_type', 'service_categories',
                   'total_services_available', 'total_services_active', 'last_updated', 'is_deleted'],
        'required': ['facility_id', 'service_categories'],
        'indexes': ['facility_id', 'facility_type', 'is_deleted']
    },
    'iot_service_management': {
        'fields': ['facility_id', 'facility_name', 'facility_type', 'service_categories',
                   'total_services_available', 'total_services_active', 'iot_enabled',
                   'last_updated', 'is_deleted'],
        'required': ['facility_id', 'service_categories'],
        'indexes': ['facility_id', 'facility_type', 'iot_enabled', 'is_deleted']
    },
    'floor_locations': {
        'fields': ['facility_id', 'floor_name', 'floor_number', 'qr_code', 'description', 'is_active', 'is_deleted'],
        'required': ['facility_id', 'floor_name', 'floor_number', 'qr_code'],
        'indexes': ['facility_id', 'qr_code', 'floor_number']
    },
    'daily_checklists': {
        'fields': ['facility_id', 'hygiene_section_id', 'floor_location_id', 'checklist_date',
                   'checklist_items', 'overall_status', 'assigned_department', 'completed_by',
                   'verified_by', 'total_items', 'completed_items', 'is_deleted'],
        'required': ['facility_id', 'hygiene_section_id', 'floor_location_id', 'checklist_date',
                     'checklist_items', 'assigned_department'],
        'indexes': ['facility_id', 'floor_location_id', 'checklist_date', 'overall_status']
    },
    'hygiene_sections': {
        'fields': ['facility_id', 'section_name', 'description', 'is_active', 'is_deleted'],
        'required': ['facility_id', 'section_name'],
        'indexes': ['facility_id']
    },
    'hygiene_checklists': {
        'fields': ['facility_id', 'section_id', 'checklist_type', 'file_name', 'file_path',
                   'file_size', 'upload_date', 'uploaded_by', 'is_active', 'is_deleted'],
        'required': ['facility_id', 'section_id', 'checklist_type', 'file_name', 'file_path'],
        'indexes': ['facility_id', 'section_id']
    },
    'rosters': {
        'fields': ['facility_id', 'date', 'shifts', 'is_deleted'],
        'required': ['facility_id', 'date'],
        'indexes': ['facility_id', 'date']
    },
    'leave_planners': {
        'fields': ['facility_id', 'employee_id', 'leave_type', 'start_date', 'end_date', 'total_days',
                   'reason', 'status', 'applied_date', 'approved_by', 'approved_date', 'is_deleted'],
        'required': ['facility_id', 'employee_id', 'leave_type', 'start_date', 'end_date'],
        'indexes': ['facility_id', 'employee_id', 'status']
    },
    'shift_schedules': {
        'fields': ['facility_id', 'employee_id', 'shift_name', 'start_time', 'end_time',
                   'working_days', 'break_duration', 'roster_date', 'is_deleted'],
        'required': ['facility_id', 'employee_id', 'shift_name', 'start_time', 'end_time'],
        'indexes': ['facility_id', 'employee_id']
    },
    'weekoff_planners': {
        'fields': ['facility_id', 'employee_id', 'week_start_date', 'week_end_date',
                   'weekoff_days', 'reason', 'status', 'is_deleted'],
        'required': ['facility_id', 'employee_id', 'week_start_date', 'week_end_date'],
        'indexes': ['facility_id', 'employee_id', 'status']
    },
    'service_providers': {
        'fields': ['facility_id', 'provider_name', 'provider_name_lower', 'category', 'contact_person',
                   'phone', 'email', 'contract_status', 'contract_start_date', 'contract_end_date',
                   'services', 'rating', 'is_active', 'is_deleted'],
        'required': ['facility_id', 'provider_name', 'category', 'contact_person', 'phone', 'email'],
        'indexes': ['facility_id', 'category', 'provider_name_lower']
    },
    'power_management': {
        'fields': ['facility_id', 'meter_id', 'location', 'connected_load', 'units', 'power_factor', 'status'],
        'required': ['facility_id', 'meter_id', 'location'],
        'indexes': ['facility_id', 'meter_id', 'status']
    },
    'water_tanks': {
        'fields': ['facility_id', 'tank_name', 'location', 'capacity', 'type', 'status', 'is_deleted'],
        'required': ['facility_id', 'tank_name', 'location', 'capacity', 'type'],
        'indexes': ['facility_id', 'status', 'type']
    },
    'borewells': {
        'fields': ['facility_id', 'borewell_name', 'location', 'depth', 'water_supplied', 'status', 'is_deleted'],
        'required': ['facility_id', 'borewell_name', 'location', 'depth', 'water_supplied'],
        'indexes': ['facility_id', 'status']
    },
    'cauvery_supplies': {
        'fields': ['facility_id', 'water_supplied', 'status', 'is_deleted'],
        'required': ['facility_id', 'water_supplied'],
        'indexes': ['facility_id', 'status']
    },
    'tankers': {
        'fields': ['facility_id', 'total_tankers', 'tanker_capacity', 'total_water_supplied', 'status', 'is_deleted'],
        'required': ['facility_id', 'total_tankers', 'tanker_capacity'],
        'indexes': ['facility_id', 'status']
    },
    'stp_readings': {
        'fields': ['facility_id', 'mlss', 'mlss_normal_range_min', 'mlss_normal_range_max', 'backwash',
                   'backwash_water_flow', 'within_normal_range', 'status', 'is_deleted'],
        'required': ['facility_id', 'mlss'],
        'indexes': ['facility_id', 'status', 'within_normal_range']
    },
    'wtp_readings': {
        'fields': ['facility_id', 'input_hardness', 'output_hardness', 'regeneration', 'regen_water_flow',
                   'tds', 'status', 'is_deleted'],
        'required': ['facility_id', 'input_hardness', 'output_hardness', 'tds'],
        'indexes': ['facility_id', 'status']
    },
    'swimming_pool_readings': {
        'fields': ['facility_id', 'ph_level', 'ph_normal_range_min', 'ph_normal_range_max', 'chlorine',
                   'chlorine_normal_range_min', 'chlorine_normal_range_max', 'backwash', 'backwash_flow',
                   'within_normal_range', 'status', 'is_deleted'],
        'required': ['facility_id', 'ph_level', 'chlorine'],
        'indexes': ['facility_id', 'status', 'within_normal_range']
    },
    'ro_plant_readings': {
        'fields': ['facility_id', 'input_tds', 'output_tds', 'regeneration', 'regen_water_flow',
                   'usage_point_hardness', 'status', 'is_deleted'],
        'required': ['facility_id', 'input_tds', 'output_tds', 'usage_point_hardness'],
        'indexes': ['facility_id', 'status']
    },
}
