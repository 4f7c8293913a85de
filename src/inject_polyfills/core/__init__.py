"""
Core Package.

Contains the usage-detection and import-injection engine:
- Source resolution and usage reports
- Usage detectors (entry and usage modes)
- Provider registry and dispatch
- Import cache and injection facade
- Target resolution and filtering
"""
