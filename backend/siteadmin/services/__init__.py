# Services package init
"""
SiteAdmin Backend - Services Layer
==================================

What:  Logic sitting between routes (HTTP) and the outside world (disk, SMTP).
How:   Services are plain classes built once by create_app() from Settings and
       handed to routes through siteadmin.dependencies.

Service Inventory:
    - JsonStore:      Named JSON documents under DATA_DIR, atomic replace
    - UploadService:  Image type/size checks and collision-free storage
    - MailService:    Contact-form mail through the configured relay
    - AuthService:    Admin password check against the stored hash

Every failure is raised as a siteadmin.exceptions type; services never build
HTTP responses.
"""
