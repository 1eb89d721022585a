"""Adapters for the remote systems feed sync talks to.

- dv360: Display & Video 360 creatives, line items and assets
- google: Google Sheets worksheets and Google Drive folders
"""
