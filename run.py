import uvicorn
from photobooth.main import app
from photobooth.config import settings

if __name__ == "__main__":
    print("🚀 Starting Email Photobooth kiosk...")
    print(f"📋 Booth config: {settings.booth_config_path}")
    print(f"🖼️  Template image: {settings.template_image_path or 'plain white canvas'}")
    print(f"🌐 Kiosk API at: http://{settings.host}:{settings.port}/api/kiosk/screen")
    print(f"📡 Live preview stream at: ws://{settings.host}:{settings.port}/ws")
    print("\n📸 Flow:")
    print("   - Config: pick the camera (POST /api/kiosk/config)")
    print("   - Camera: get ready, 3-2-1, snap, once per template frame")
    print("   - Generation: photos composed onto the template")
    print("   - Email: enter recipients, then submit an empty field")
    print("   - Sending: the photo strip is emailed")
    print("\n🛑 Press Ctrl+C to stop the server\n")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port
    )
