import logging
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from pymongo.errors import PyMongoError

import config
import cors
import database
import errors
import schemas
import whatsapp
from auth import Principal, clear_auth_cookie, get_current_admin, get_optional_admin, set_auth_cookie
from auth import login as login_admin
from errors import InvalidInput, NotFound, StoreConnectionError
from schemas import (
    About, AboutUpdate, Film, FilmUpdate, Footer, FooterUpdate, Gallery, Hero, HeroUpdate,
    LoginRequest, Media, MediaUpdate, OurStory, OurStoryUpdate, Reel, ReelUpdate, Review,
    ReviewUpdate, Section, Service, ServiceUpdate, Setting, Story, StoryUpdate, Testimonial,
    TestimonialUpdate, WeddingGalleryImage, WeddingGalleryImageDelete, WeddingGalleryImageUpdate,
    WeddingStory, WeddingStoryUpdate,
)

app = FastAPI(title="Studio CMS Backend")
errors.install_handlers(app)

NEWEST = [("createdAt", -1)]


# ---------------------- Helpers ----------------------
def found(doc: Optional[dict], label: str) -> dict:
    if doc is None:
        raise NotFound(f"{label} not found")
    return doc


def update_or_404(collection: str, doc_id: str, payload: BaseModel, label: str) -> dict:
    return found(database.update_document(collection, doc_id, schemas.changes(payload)), label)


def delete_or_404(collection: str, doc_id: str, label: str) -> dict:
    found(database.delete_document(collection, doc_id), label)
    return {"message": f"{label} deleted successfully"}


def with_object_ids(data: Dict[str, Any]) -> Dict[str, Any]:
    """Store reference fields (heroStoryId, contentIds) as ObjectIds."""
    data = dict(data)
    if data.get("heroStoryId"):
        data["heroStoryId"] = database.as_object_id(data["heroStoryId"])
    if data.get("contentIds") is not None:
        data["contentIds"] = [database.as_object_id(v) for v in data["contentIds"]]
    return data


# ---------------------- Auth ----------------------
@app.post("/api/auth/login")
def login(payload: LoginRequest, response: Response):
    principal, token = login_admin(payload.email, payload.password)
    set_auth_cookie(response, token)
    return {"email": principal.email, "role": principal.role, "success": True}


@app.get("/api/auth/me")
def me(admin: Principal = Depends(get_current_admin)):
    return {"email": admin.email, "role": admin.role}


@app.post("/api/auth/logout")
def logout(response: Response):
    clear_auth_cookie(response)
    return {"ok": True}


# ---------------------- About ----------------------
@app.get("/api/about")
def get_about():
    return found(database.find_one("about"), "About data")


@app.post("/api/about", status_code=201)
def create_about(payload: About, admin: Principal = Depends(get_current_admin)):
    if database.find_one("about"):
        raise InvalidInput("About data already exists. Use PUT to update.")
    return database.create_document("about", payload)


@app.put("/api/about/{about_id}")
def update_about(about_id: str, payload: AboutUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("about", about_id, payload, "About data")


@app.delete("/api/about/{about_id}")
def delete_about(about_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("about", about_id, "About data")


# ---------------------- Films ----------------------
@app.get("/api/films")
def list_films():
    return database.get_documents("film", sort=NEWEST)


@app.post("/api/films", status_code=201)
def create_film(payload: Film, admin: Principal = Depends(get_current_admin)):
    return database.create_document("film", payload)


@app.put("/api/films/{film_id}")
def update_film(film_id: str, payload: FilmUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("film", film_id, payload, "Film")


@app.delete("/api/films/{film_id}")
def delete_film(film_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("film", film_id, "Film")


# ---------------------- Footer (singleton) ----------------------
@app.get("/api/footer")
def get_footer():
    return found(database.find_one("footer"), "Footer data")


@app.post("/api/footer", status_code=201)
def save_footer(payload: Footer, admin: Principal = Depends(get_current_admin)):
    return database.upsert_document("footer", {}, payload)


@app.put("/api/footer/{footer_id}")
def update_footer(footer_id: str, payload: FooterUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("footer", footer_id, payload, "Footer data")


# ---------------------- Gallery ----------------------
@app.get("/api/gallery")
def list_gallery():
    return database.get_documents("gallery", sort=NEWEST)


@app.get("/api/gallery/highlight")
def list_highlight_gallery():
    return database.get_documents("gallery", {"isHighlight": True}, sort=NEWEST)


@app.post("/api/gallery", status_code=201)
def create_gallery_image(payload: Gallery, admin: Principal = Depends(get_current_admin)):
    return database.create_document("gallery", payload)


@app.delete("/api/gallery/{image_id}")
def delete_gallery_image(image_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("gallery", image_id, "Photo")


# ---------------------- Hero ----------------------
@app.get("/api/hero")
def get_hero():
    return database.find_one("hero", sort=[("updatedAt", -1)]) or {}


@app.post("/api/hero", status_code=201)
def create_hero(payload: Hero, admin: Principal = Depends(get_current_admin)):
    # only one hero is ever kept
    return database.replace_all("hero", payload)


@app.put("/api/hero/{hero_id}")
def update_hero(hero_id: str, payload: HeroUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("hero", hero_id, payload, "Hero")


@app.delete("/api/hero/{hero_id}")
def delete_hero(hero_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("hero", hero_id, "Hero")


# ---------------------- Media ----------------------
@app.get("/api/media")
def list_media():
    return database.get_documents("media", sort=NEWEST)


@app.post("/api/media", status_code=201)
def create_media(payload: Media, admin: Principal = Depends(get_current_admin)):
    return database.create_document("media", payload)


@app.api_route("/api/media/{media_id}", methods=["PUT", "PATCH"])
def update_media(media_id: str, payload: MediaUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("media", media_id, payload, "Media")


@app.delete("/api/media/{media_id}")
def delete_media(media_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("media", media_id, "Media")


# ---------------------- Our story ----------------------
@app.get("/api/our-story")
def get_our_story():
    return database.find_one("ourstory", sort=[("updatedAt", -1)]) or {}


@app.post("/api/our-story", status_code=201)
def create_our_story(payload: OurStory, admin: Principal = Depends(get_current_admin)):
    return database.replace_all("ourstory", payload)


@app.put("/api/our-story/{story_id}")
def update_our_story(story_id: str, payload: OurStoryUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("ourstory", story_id, payload, "Our story")


@app.delete("/api/our-story/{story_id}")
def delete_our_story(story_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("ourstory", story_id, "Our story")


# ---------------------- Reels (public site) ----------------------
@app.options("/api/reels")
def reels_preflight(request: Request):
    return cors.preflight(request)


@app.get("/api/reels")
def list_reels(request: Request):
    return cors.cors_response(database.get_documents("reel", sort=NEWEST), 200, request)


@app.post("/api/reels")
def create_reel(payload: Reel, request: Request, admin: Principal = Depends(get_current_admin)):
    return cors.cors_response(database.create_document("reel", payload), 201, request)


@app.api_route("/api/reels/{reel_id}", methods=["PUT", "PATCH"])
def update_reel(reel_id: str, payload: ReelUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("reel", reel_id, payload, "Reel")


@app.delete("/api/reels/{reel_id}")
def delete_reel(reel_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("reel", reel_id, "Reel")


# ---------------------- Reviews ----------------------
@app.get("/api/reviews")
def list_reviews():
    return database.get_documents("review", sort=NEWEST)


@app.post("/api/reviews", status_code=201)
def create_review(payload: Review, admin: Principal = Depends(get_current_admin)):
    return database.create_document("review", payload)


@app.put("/api/reviews/{review_id}")
def update_review(review_id: str, payload: ReviewUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("review", review_id, payload, "Review")


@app.delete("/api/reviews/{review_id}")
def delete_review(review_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("review", review_id, "Review")


# ---------------------- Sections (public site) ----------------------
@app.options("/api/sections")
def sections_preflight(request: Request):
    return cors.preflight(request)


@app.get("/api/sections")
def list_sections(request: Request):
    return cors.cors_response(database.get_documents("section", sort=[("order", 1)]), 200, request)


@app.post("/api/sections")
def save_section(payload: Section, request: Request, admin: Principal = Depends(get_current_admin)):
    data = with_object_ids(payload.model_dump())
    section = database.upsert_document("section", {"key": payload.key}, data)
    return cors.cors_response(section, 201, request)


@app.put("/api/sections/{key}")
def update_section(key: str, body: Dict[str, Any] = Body(default={}), admin: Principal = Depends(get_current_admin)):
    # the path key wins over any key in the body and must itself be valid
    data = with_object_ids(schemas.validate("section", {**body, "key": key}, partial=True))
    return found(database.update_one("section", {"key": key}, data), "Section")


# ---------------------- Services ----------------------
@app.get("/api/services")
def list_services():
    return database.get_documents("service", sort=NEWEST)


@app.post("/api/services", status_code=201)
def create_service(payload: Service, admin: Principal = Depends(get_current_admin)):
    return database.create_document("service", payload)


@app.put("/api/services/{service_id}")
def update_service(service_id: str, payload: ServiceUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("service", service_id, payload, "Service")


@app.delete("/api/services/{service_id}")
def delete_service(service_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("service", service_id, "Service")


# ---------------------- Settings (singleton) ----------------------
@app.get("/api/settings")
def get_settings():
    return database.find_one("setting") or {}


@app.post("/api/settings")
def save_settings(payload: Setting, admin: Principal = Depends(get_current_admin)):
    # an omitted heroStoryId keeps the stored reference
    return database.upsert_document("setting", {}, with_object_ids(payload.model_dump(exclude_none=True)))


# ---------------------- Stories (public site) ----------------------
@app.options("/api/stories")
def stories_preflight(request: Request):
    return cors.preflight(request)


@app.get("/api/stories")
def list_stories(request: Request):
    return cors.cors_response(database.get_documents("story", sort=NEWEST), 200, request)


@app.get("/api/stories/featured")
def list_featured_stories(request: Request):
    stories = database.get_documents("story", {"isFeatured": True}, sort=NEWEST)
    return cors.cors_response(stories, 200, request)


@app.post("/api/stories")
def create_story(payload: Story, request: Request, admin: Principal = Depends(get_current_admin)):
    return cors.cors_response(database.create_document("story", payload), 201, request)


@app.put("/api/stories/{story_id}")
def update_story(story_id: str, payload: StoryUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("story", story_id, payload, "Story")


@app.delete("/api/stories/{story_id}")
def delete_story(story_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("story", story_id, "Story")


# ---------------------- Testimonials (public site) ----------------------
@app.options("/api/testimonials")
def testimonials_preflight(request: Request):
    return cors.preflight(request)


@app.get("/api/testimonials")
def list_testimonials(request: Request, approved: Optional[bool] = None):
    flt = {"approved": approved} if approved is not None else {}
    return cors.cors_response(database.get_documents("testimonial", flt, sort=NEWEST), 200, request)


@app.post("/api/testimonials")
def create_testimonial(
    payload: Testimonial,
    request: Request,
    admin: Optional[Principal] = Depends(get_optional_admin),
):
    data = payload.model_dump()
    if admin is None:
        # visitors can submit, only an admin can approve
        data["approved"] = False
    return cors.cors_response(database.create_document("testimonial", data), 201, request)


@app.api_route("/api/testimonials/{testimonial_id}", methods=["PUT", "PATCH"])
def update_testimonial(testimonial_id: str, payload: TestimonialUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("testimonial", testimonial_id, payload, "Testimonial")


@app.delete("/api/testimonials/{testimonial_id}")
def delete_testimonial(testimonial_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("testimonial", testimonial_id, "Testimonial")


# ---------------------- Wedding gallery (public site) ----------------------
@app.options("/api/wedding-gallery")
def wedding_gallery_preflight(request: Request):
    return cors.preflight(request)


@app.get("/api/wedding-gallery")
def list_wedding_gallery(request: Request):
    images = database.get_documents("weddinggalleryimage", sort=[("order", 1), ("createdAt", -1)])
    return cors.cors_response({"success": True, "data": images}, 200, request)


@app.post("/api/wedding-gallery")
def create_wedding_gallery_image(
    payload: WeddingGalleryImage,
    request: Request,
    admin: Principal = Depends(get_current_admin),
):
    image = database.create_document("weddinggalleryimage", payload)
    return cors.cors_response({"success": True, "data": image}, 201, request)


@app.put("/api/wedding-gallery")
def update_wedding_gallery_image(
    payload: WeddingGalleryImageUpdate,
    request: Request,
    admin: Principal = Depends(get_current_admin),
):
    update = schemas.changes(payload)
    image_id = update.pop("id")
    image = found(database.update_document("weddinggalleryimage", image_id, update), "Image")
    return cors.cors_response({"success": True, "data": image}, 200, request)


@app.delete("/api/wedding-gallery")
def delete_wedding_gallery_image(
    payload: WeddingGalleryImageDelete,
    request: Request,
    admin: Principal = Depends(get_current_admin),
):
    found(database.delete_document("weddinggalleryimage", payload.id), "Image")
    return cors.cors_response({"success": True, "message": "Image deleted"}, 200, request)


# ---------------------- Wedding stories ----------------------
@app.get("/api/weddings")
def list_weddings():
    return database.get_documents("weddingstory", sort=NEWEST)


@app.get("/api/weddings/{wedding_id}")
def get_wedding(wedding_id: str):
    return found(database.find_document("weddingstory", wedding_id), "Wedding")


@app.post("/api/weddings", status_code=201)
def create_wedding(payload: WeddingStory, admin: Principal = Depends(get_current_admin)):
    return database.create_document("weddingstory", payload)


@app.put("/api/weddings/{wedding_id}")
def update_wedding(wedding_id: str, payload: WeddingStoryUpdate, admin: Principal = Depends(get_current_admin)):
    return update_or_404("weddingstory", wedding_id, payload, "Wedding")


@app.delete("/api/weddings/{wedding_id}")
def delete_wedding(wedding_id: str, admin: Principal = Depends(get_current_admin)):
    return delete_or_404("weddingstory", wedding_id, "Wedding")


# ---------------------- WhatsApp widget ----------------------
@app.get("/widget/whatsapp", response_class=HTMLResponse)
def whatsapp_button():
    return whatsapp.render_button()


@app.get("/widget/whatsapp/link")
def whatsapp_link():
    return {"url": whatsapp.whatsapp_url()}


# ---------------------- Health ----------------------
@app.get("/")
def read_root():
    return {"message": "Studio CMS backend running"}


@app.get("/test")
def test_connection() -> Dict[str, Any]:
    try:
        db = database.connect()
        return {
            "backend": "ok",
            "database": "ok",
            "database_name": config.MONGODB_DB,
            "collections": db.list_collection_names(),
        }
    except (StoreConnectionError, PyMongoError) as e:
        return {
            "backend": "ok",
            "database": "error",
            "error": str(getattr(e, "detail", e)),
            "database_name": config.MONGODB_DB,
        }


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
