"""Software rasterizer: rendering context, shaders and a z-buffered canvas."""