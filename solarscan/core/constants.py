"""Application-wide constants."""

APP_NAME = "solarscan"
VERSION = "1.0.0"

SUPPORTED_IMAGE_FORMATS = ("image/jpeg", "image/png", "image/webp")

# Luma weights used for every grayscale conversion (R, G, B)
GRAY_WEIGHTS = (0.299, 0.587, 0.114)

SHARPEN_KERNEL = (0, -1, 0,
                  -1, 5, -1,
                  0, -1, 0)
SOBEL_X_KERNEL = (-1, 0, 1,
                  -2, 0, 2,
                  -1, 0, 1)
SOBEL_Y_KERNEL = (-1, -2, -1,
                  0, 0, 0,
                  1, 2, 1)

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
VALID_ROTATIONS = (0, 90, 180, 270)

DETAIL_LEVELS = ("basic", "detailed")
