import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

import config
from database import engine, Base, SessionLocal

# --- IMPORT MODELS (create_all ke liye register hone chahiye) ---
from models import users, attendance as attendance_models, library as library_models, campus as campus_models

# --- IMPORT ROUTERS (APIs) ---
from routers import auth, attendance, timetable, library, campus, notifications, profile, functions, tools, storage
from services.admin_setup import setup_admin
from services.backend_client import BackendClient

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)


# --- AUTO MIGRATION: Add missing columns to existing tables ---
def run_migrations():
    """
    Adds columns that came after the first release to an existing PostgreSQL
    database. Runs on every server start; SQLite gets fresh tables from create_all.
    """
    db = SessionLocal()

    try:
        is_postgres = 'postgresql' in str(engine.url)

        if is_postgres:
            migrations = [
                # profiles
                "ALTER TABLE profiles ADD COLUMN IF NOT EXISTS avatar_url VARCHAR(500)",
                "ALTER TABLE profiles ADD COLUMN IF NOT EXISTS is_active BOOLEAN DEFAULT TRUE",

                # subject_schedules
                "ALTER TABLE subject_schedules ADD COLUMN IF NOT EXISTS day_of_week VARCHAR(10)",

                # attendance
                "ALTER TABLE attendance ADD COLUMN IF NOT EXISTS notes TEXT",
                "ALTER TABLE attendance ADD COLUMN IF NOT EXISTS marked_by INTEGER",

                # resources
                "ALTER TABLE lab_manuals ADD COLUMN IF NOT EXISTS link_url VARCHAR(500)",
                "ALTER TABLE organizers ADD COLUMN IF NOT EXISTS link_url VARCHAR(500)",
                "ALTER TABLE events ADD COLUMN IF NOT EXISTS image_url VARCHAR(500)",
                "ALTER TABLE syllabus ADD COLUMN IF NOT EXISTS academic_year VARCHAR(20) DEFAULT '2024-2025'",
            ]

            for sql in migrations:
                try:
                    db.execute(text(sql))
                    db.commit()
                except Exception as e:
                    db.rollback()
                    print(f"Migration note: {str(e)[:100]}")

            print("✅ Database migrations completed successfully!")
        else:
            print("ℹ️ SQLite detected - skipping PostgreSQL migrations")
    finally:
        db.close()


# --- ADMIN BOOTSTRAP (sirf jab ADMIN_PASSWORD set ho) ---
def bootstrap_admin():
    if not config.ADMIN_PASSWORD:
        print("ℹ️ ADMIN_PASSWORD not set - skipping admin bootstrap")
        return None

    db = SessionLocal()
    try:
        result = setup_admin(BackendClient(db))
    finally:
        db.close()

    if result.get("success"):
        print(f"✅ Admin bootstrap: {result['status']} ({config.ADMIN_EMAIL})")
    else:
        print(f"⚠️ Admin bootstrap failed: {result.get('error')}")
    return result


run_migrations()
bootstrap_admin()

app = FastAPI(title="ECE Semester Portal")

# ==========================================
# ✅ CORS MIDDLEWARE
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- OBJECT STORAGE FOLDERS ---
for bucket in ("documents", "avatars"):
    os.makedirs(os.path.join(config.STORAGE_DIR, bucket), exist_ok=True)

# --- REGISTER ROUTERS ---
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(attendance.router)
app.include_router(timetable.router)
app.include_router(library.router)
app.include_router(campus.router)
app.include_router(notifications.router)
app.include_router(functions.router)
app.include_router(tools.router)
app.include_router(storage.router)


@app.get("/")
def health():
    return {"status": "ok", "app": "ECE Semester Portal"}
