def surrogatepass(code):
    return code.encode('utf-16', 'surrogatepass').decode('utf-16')

# Arrows, in the order the arrow toggle cycles through them
DOWN_ARROWS = ['⇣', '↡', '⬇', '↓', '⇓', '⇩', '↧', '⇊']
UP_ARROWS   = ['⇡', '↟', '⬆', '↑', '⇑', '⇧', '↥', '⇈']
ARROW_PAIRS = list(zip(DOWN_ARROWS, UP_ARROWS))

default_down_arrow = DOWN_ARROWS[0]
default_up_arrow   = UP_ARROWS[0]

# Spacing
nbsp        = '\u00a0'
icon_spacer = '  '

# Alerts
md_alert               = surrogatepass('\udb80\udc26')
md_network_off         = surrogatepass('\udb83\udc9b')
