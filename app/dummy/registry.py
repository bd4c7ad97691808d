from app.dummy.mission import seed_missions
from app.dummy.user import seed_users

SEEDERS = {
    "user": seed_users,
    "mission": seed_missions,
}
