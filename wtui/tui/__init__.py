"""Terminal interface pieces: focus, key bindings, commands, header/footer and log overlay."""