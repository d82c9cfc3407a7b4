"""Clinical application for the hospital API.

Holds the staff, patient and clinical-record models, the severity
classifier, the critical-state coordinator and notification dispatch, and
the REST endpoints built on them.
"""
