from fastapi.templating import Jinja2Templates

from core.config import settings
from schemas.posts import MAX_BODY_LENGTH, MAX_TITLE_LENGTH

templates = Jinja2Templates(directory=str(settings.views.templates_dir))
templates.env.globals.update(
    app_title=settings.app_title,
    max_title_length=MAX_TITLE_LENGTH,
    max_body_length=MAX_BODY_LENGTH,
)
